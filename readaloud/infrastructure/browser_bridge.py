"""Browser-side collaborators reached through the player WebSocket."""

import asyncio
import itertools
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..domain.entities.article import CandidateLinks, ExtractedContent
from ..domain.entities.messages import PageRequestMessage
from ..domain.entities.websocket_messages import PageResponse
from ..domain.errors import ExtractionFailed
from ..domain.interfaces.content_extractor import ContentExtractor
from ..domain.interfaces.page_navigator import PageNavigator
from ..domain.services.text_chunking import DEFAULT_MAX_CHUNK_CHARS, chunk_article_text
from .presentation_channel import PresentationChannel

logger = logging.getLogger(__name__)


class BrowserBridge(ContentExtractor, PageNavigator):
    """
    Implements content extraction and page navigation by asking the browser.

    Each call sends a ``page.request`` and waits for the ``page.response``
    carrying the same request id. Responses are delivered by the WebSocket
    handler directly through :meth:`resolve`, outside the inbound event
    queue, so a handler awaiting the browser never blocks its own answer.
    """

    def __init__(
        self,
        channel: PresentationChannel,
        timeout_seconds: float = 10.0,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    ):
        self.channel = channel
        self.timeout_seconds = timeout_seconds
        self.max_chunk_chars = max_chunk_chars
        self._pending: Dict[str, asyncio.Future] = {}
        self._counter = itertools.count(1)

    async def _request(self, action: str, page_id: str, url: Optional[str] = None) -> Dict[str, Any]:
        request_id = f"page-req-{next(self._counter)}"
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        try:
            message = PageRequestMessage(request_id=request_id, action=action, page_id=page_id, url=url)
            if not self.channel.send(message):
                raise ExtractionFailed(f"No browser connected to {action.replace('_', ' ')} for page {page_id}")

            try:
                response: PageResponse = await asyncio.wait_for(future, timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                raise ExtractionFailed(f"Browser did not answer {action} for page {page_id} in time")
        finally:
            self._pending.pop(request_id, None)

        if not response.ok:
            raise ExtractionFailed(response.error or f"Browser failed to {action.replace('_', ' ')}")
        return response.data

    def resolve(self, response: PageResponse) -> bool:
        """Deliver a browser response to the request waiting for it.

        Returns:
            bool: False if no request is waiting for this id.
        """
        future = self._pending.get(response.request_id)
        if future is None or future.done():
            logger.warning(f"Ignoring response to unknown page request {response.request_id}")
            return False
        future.set_result(response)
        return True

    def fail_all(self, reason: str) -> None:
        """Fail every outstanding request, e.g. when the browser disconnects."""
        for request_id, future in list(self._pending.items()):
            if not future.done():
                future.set_result(PageResponse(request_id=request_id, ok=False, error=reason))

    async def extract_readable_content(self, page_id: str) -> ExtractedContent:
        data = await self._request("extract_content", page_id)
        try:
            content = ExtractedContent.model_validate(data)
        except ValidationError as e:
            raise ExtractionFailed(f"Malformed content from page {page_id}: {e}") from e

        if not content.text_chunks and content.text_content:
            content.text_chunks = chunk_article_text(content.text_content, self.max_chunk_chars)
        logger.info(f"Extracted {len(content.text_chunks)} chunks from page {page_id}")
        return content

    async def extract_candidate_links(self, page_id: str) -> CandidateLinks:
        data = await self._request("extract_links", page_id)
        try:
            return CandidateLinks.model_validate(data)
        except ValidationError as e:
            raise ExtractionFailed(f"Malformed links from page {page_id}: {e}") from e

    async def get_page_url(self, page_id: str) -> Optional[str]:
        try:
            data = await self._request("get_url", page_id)
        except ExtractionFailed as e:
            logger.warning(f"Could not get URL of page {page_id}: {e.detail}")
            return None
        return data.get("url")

    async def navigate(self, page_id: str, url: str) -> None:
        await self._request("navigate", page_id, url=url)
        logger.info(f"Page {page_id} navigating to {url}")
