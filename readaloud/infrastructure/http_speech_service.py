"""HTTP client for the remote synthesis and next-page services."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..domain.entities.article import NextPageRequest, NextPageResolution
from ..domain.entities.audio import AudioArtifact
from ..domain.errors import ServiceUnavailable, SynthesisFailed
from ..domain.interfaces.next_page_resolver import NextPageResolver
from ..domain.interfaces.speech_synthesizer import SpeechSynthesizer

logger = logging.getLogger(__name__)


class HttpSpeechService(SpeechSynthesizer, NextPageResolver):
    """Synthesizes chunk audio and resolves next pages over HTTP.

    Requests are not retried. ``timeout=None`` waits for as long as the
    service takes.
    """

    def __init__(
        self,
        synthesis_url: str,
        next_page_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.synthesis_url = synthesis_url
        self.next_page_url = next_page_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def synthesize(self, text: str) -> AudioArtifact:
        """Fetch the audio for ``text``.

        Raises:
            SynthesisFailed: On a transport error, an error status or an empty body.
        """
        try:
            response = await self._client.post(self.synthesis_url, json={"text": text})
        except httpx.HTTPError as e:
            raise SynthesisFailed(f"Synthesis request failed: {e}") from e

        if response.is_error:
            raise SynthesisFailed(
                f"Synthesis server error: {response.status_code} - {response.text or response.reason_phrase}"
            )

        if not response.content:
            raise SynthesisFailed("Fetched audio is not valid or is empty.")

        media_type = response.headers.get("content-type", "audio/mpeg").split(";")[0].strip()
        logger.debug(f"Synthesized {len(response.content)} bytes of {media_type}")
        return AudioArtifact(content=response.content, media_type=media_type or "audio/mpeg")

    async def resolve_next_page(self, request: NextPageRequest) -> NextPageResolution:
        """Ask the service which candidate link leads to the next page.

        Raises:
            ServiceUnavailable: On a transport error, an error status or a malformed answer.
        """
        try:
            response = await self._client.post(self.next_page_url, json=request.model_dump(by_alias=True))
            response.raise_for_status()
            resolution = NextPageResolution.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise ServiceUnavailable(
                f"Next page service error: {e.response.status_code}",
                reasoning=e.response.text or None,
            ) from e
        except httpx.HTTPError as e:
            raise ServiceUnavailable(f"Next page request failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ServiceUnavailable(f"Malformed next page answer: {e}") from e

        logger.info(
            f"Next page service answered found={resolution.next_link_found}, url={resolution.next_link_url}"
        )
        return resolution

    async def aclose(self) -> None:
        await self._client.aclose()
