"""Tests for HttpSpeechService against a mocked transport."""

import json

import httpx
import pytest

from readaloud.domain.entities.article import CandidateLink, NextPageRequest
from readaloud.domain.errors import ServiceUnavailable, SynthesisFailed
from readaloud.infrastructure.http_speech_service import HttpSpeechService

SYNTHESIS_URL = "http://tts.test/synthesize"
NEXT_PAGE_URL = "http://tts.test/next-page"


def make_service(handler) -> HttpSpeechService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSpeechService(SYNTHESIS_URL, NEXT_PAGE_URL, client=client)


class TestSynthesize:

    @pytest.mark.asyncio
    async def test_returns_audio(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"ID3audio", headers={"content-type": "audio/mpeg; charset=binary"})

        service = make_service(handler)
        audio = await service.synthesize("Hello world.")
        await service.aclose()

        assert seen == {"url": SYNTHESIS_URL, "body": {"text": "Hello world."}}
        assert audio.content == b"ID3audio"
        assert audio.media_type == "audio/mpeg"

    @pytest.mark.asyncio
    async def test_error_status(self):
        service = make_service(lambda request: httpx.Response(503, text="overloaded"))

        with pytest.raises(SynthesisFailed) as exc_info:
            await service.synthesize("Hello")
        assert "503 - overloaded" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_empty_body(self):
        service = make_service(lambda request: httpx.Response(200, content=b""))

        with pytest.raises(SynthesisFailed):
            await service.synthesize("Hello")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)

        with pytest.raises(SynthesisFailed):
            await service.synthesize("Hello")


class TestResolveNextPage:

    @pytest.fixture
    def request_model(self):
        return NextPageRequest(
            current_url="https://example.com/1",
            current_title="Chapter 1",
            links=[CandidateLink(href="https://example.com/2", text="Next")],
        )

    @pytest.mark.asyncio
    async def test_posts_camel_case_and_parses_answer(self, request_model):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "nextLinkFound": True,
                    "nextLinkUrl": "https://example.com/2",
                    "nextLinkText": "Next",
                    "reasoning": "labelled next",
                },
            )

        service = make_service(handler)
        resolution = await service.resolve_next_page(request_model)

        assert seen["body"] == {
            "currentUrl": "https://example.com/1",
            "currentTitle": "Chapter 1",
            "links": [{"href": "https://example.com/2", "text": "Next"}],
        }
        assert resolution.next_link_found is True
        assert resolution.next_link_url == "https://example.com/2"
        assert resolution.reasoning == "labelled next"

    @pytest.mark.asyncio
    async def test_error_status(self, request_model):
        service = make_service(lambda request: httpx.Response(500, text="model error"))

        with pytest.raises(ServiceUnavailable) as exc_info:
            await service.resolve_next_page(request_model)
        assert exc_info.value.reasoning == "model error"

    @pytest.mark.asyncio
    async def test_malformed_answer(self, request_model):
        service = make_service(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(ServiceUnavailable):
            await service.resolve_next_page(request_model)
