"""Shared fakes for the read-aloud engine tests."""

import asyncio
from typing import Optional

import pytest

from readaloud.domain.entities.article import (
    CandidateLink,
    CandidateLinks,
    ExtractedContent,
    NextPageRequest,
    NextPageResolution,
)
from readaloud.domain.entities.audio import AudioArtifact
from readaloud.domain.entities.messages import OutboundMessage
from readaloud.domain.errors import ExtractionFailed, ServiceUnavailable, SynthesisFailed
from readaloud.domain.services.continuation_coordinator import ContinuationCoordinator
from readaloud.domain.services.history_service import HistoryService
from readaloud.domain.services.persistence_gateway import PersistenceGateway
from readaloud.domain.services.prefetch_cache import PrefetchCache
from readaloud.domain.services.session_state_machine import SessionStateMachine
from readaloud.infrastructure.local_key_value_store import LocalKeyValueStore


def audio_for(text: str) -> AudioArtifact:
    return AudioArtifact(content=f"audio:{text}".encode())


class FakeSynthesizer:
    """Synthesizer returning deterministic audio, optionally failing or blocking."""

    def __init__(self):
        self.calls: list[str] = []
        self.fail_texts: set[str] = set()
        self.fail_all = False
        self.gate: Optional[asyncio.Event] = None

    async def synthesize(self, text: str) -> AudioArtifact:
        self.calls.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_all or text in self.fail_texts:
            raise SynthesisFailed(f"Synthesis server error: 503 - {text}")
        return audio_for(text)


class RecordingSink:
    """Presentation sink that records every message it accepts."""

    def __init__(self, attached: bool = True):
        self.attached = attached
        self.messages: list[OutboundMessage] = []

    @property
    def is_attached(self) -> bool:
        return self.attached

    def send(self, message: OutboundMessage) -> bool:
        if not self.attached:
            return False
        self.messages.append(message)
        return True

    def of_type(self, message_type) -> list:
        return [m for m in self.messages if isinstance(m, message_type)]


class FakeBrowser:
    """Content extractor and page navigator over in-memory pages."""

    def __init__(self):
        self.urls: dict[str, str] = {}
        self.contents: dict[str, ExtractedContent] = {}
        self.links: dict[str, list[CandidateLink]] = {}
        self.navigations: list[tuple[str, str]] = []
        self.fail_links = False

    def add_page(self, page_id: str, url: str, chunks: list[str], title: Optional[str] = "Article"):
        self.urls[page_id] = url
        self.contents[page_id] = ExtractedContent(title=title, text_chunks=chunks, length=sum(map(len, chunks)))

    async def extract_readable_content(self, page_id: str) -> ExtractedContent:
        if page_id not in self.contents:
            raise ExtractionFailed(f"No content for page {page_id}")
        return self.contents[page_id]

    async def extract_candidate_links(self, page_id: str) -> CandidateLinks:
        if self.fail_links:
            raise ExtractionFailed("Could not reach the page")
        return CandidateLinks(
            current_url=self.urls.get(page_id, ""),
            current_title="Article",
            links=self.links.get(page_id, []),
        )

    async def get_page_url(self, page_id: str) -> Optional[str]:
        return self.urls.get(page_id)

    async def navigate(self, page_id: str, url: str) -> None:
        self.navigations.append((page_id, url))


class FakeResolver:
    """Next-page resolver with a canned answer."""

    def __init__(self, resolution: Optional[NextPageResolution] = None):
        self.resolution = resolution or NextPageResolution(next_link_found=False, reasoning="no pagination")
        self.requests: list[NextPageRequest] = []
        self.unavailable = False

    async def resolve_next_page(self, request: NextPageRequest) -> NextPageResolution:
        self.requests.append(request)
        if self.unavailable:
            raise ServiceUnavailable("Next page service error: 500")
        return self.resolution


@pytest.fixture
def store():
    return LocalKeyValueStore()


@pytest.fixture
def gateway(store):
    return PersistenceGateway(store)


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def browser():
    return FakeBrowser()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def history(store):
    return HistoryService(store)


@pytest.fixture
def prefetch(synthesizer, gateway):
    return PrefetchCache(synthesizer, gateway)


@pytest.fixture
def state_machine(gateway, prefetch, synthesizer, browser, sink, history):
    return SessionStateMachine(
        gateway=gateway,
        prefetch=prefetch,
        synthesizer=synthesizer,
        extractor=browser,
        navigator=browser,
        presentation=sink,
        history=history,
    )


@pytest.fixture
def coordinator(state_machine, browser, resolver, sink):
    return ContinuationCoordinator(
        state_machine=state_machine,
        extractor=browser,
        navigator=browser,
        resolver=resolver,
        presentation=sink,
        pending_timeout_seconds=60.0,
    )
