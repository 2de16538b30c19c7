"""Tests for cross-page continuation."""

import asyncio

import pytest

from readaloud.domain.entities.article import CandidateLink, NextPageResolution
from readaloud.domain.entities.messages import ChunkReadyMessage, NavigationOutcomeMessage
from readaloud.domain.entities.reading_session import SessionPhase
from readaloud.domain.services.continuation_coordinator import ContinuationCoordinator
from readaloud.domain.services.persistence_gateway import SESSION_KEY

PAGE_ID = "page-1"
PAGE_URL = "https://example.com/story/1"
NEXT_URL = "https://example.com/story/2"


async def settle(prefetch):
    if prefetch.task is not None:
        await prefetch.task


async def read_to_end(state_machine, browser, chunks=("a", "b")):
    browser.add_page(PAGE_ID, PAGE_URL, list(chunks))
    browser.links[PAGE_ID] = [
        CandidateLink(href="https://example.com/about", text="About"),
        CandidateLink(href=NEXT_URL, text="Next chapter"),
    ]
    await state_machine.set_auto_advance(True)
    await state_machine.start_for_page(PAGE_ID, continue_prior_auto_advance=True)
    for _ in range(len(chunks)):
        await settle(state_machine.prefetch)
        await state_machine.advance()


def outcomes(sink):
    return sink.of_type(NavigationOutcomeMessage)


@pytest.fixture
def found_next_page(resolver):
    resolver.resolution = NextPageResolution(
        next_link_found=True,
        next_link_url=NEXT_URL,
        next_link_text="Next chapter",
        reasoning="The link text says next chapter",
    )
    return resolver


class TestAttemptFailures:

    @pytest.mark.asyncio
    async def test_no_next_page_resets_with_reasoning(self, state_machine, coordinator, browser, resolver, sink):
        await read_to_end(state_machine, browser)

        assert state_machine.phase == SessionPhase.EMPTY
        assert state_machine.session.auto_advance is True
        [outcome] = outcomes(sink)
        assert outcome.success is False
        assert outcome.navigating is False
        assert outcome.reasoning == "no pagination"
        assert browser.navigations == []

    @pytest.mark.asyncio
    async def test_resolver_receives_page_links(self, state_machine, coordinator, browser, resolver):
        await read_to_end(state_machine, browser)

        [request] = resolver.requests
        assert request.current_url == PAGE_URL
        assert [link.href for link in request.links] == ["https://example.com/about", NEXT_URL]

    @pytest.mark.asyncio
    async def test_source_changed(self, state_machine, coordinator, browser, resolver, sink):
        browser.add_page(PAGE_ID, PAGE_URL, ["a"])
        await state_machine.set_auto_advance(True)
        await state_machine.start_for_page(PAGE_ID, continue_prior_auto_advance=True)
        browser.urls[PAGE_ID] = "https://example.com/elsewhere"

        await state_machine.advance()

        assert resolver.requests == []
        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[0].success is False

    @pytest.mark.asyncio
    async def test_page_closed(self, state_machine, coordinator, browser, sink):
        browser.add_page(PAGE_ID, PAGE_URL, ["a"])
        await state_machine.set_auto_advance(True)
        await state_machine.start_for_page(PAGE_ID, continue_prior_auto_advance=True)
        del browser.urls[PAGE_ID]

        assert await coordinator.attempt(PAGE_ID) is False
        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[0].navigating is False

    @pytest.mark.asyncio
    async def test_link_extraction_failure(self, state_machine, coordinator, browser, resolver, sink):
        browser.fail_links = True
        await read_to_end(state_machine, browser)

        assert resolver.requests == []
        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[0].success is False

    @pytest.mark.asyncio
    async def test_service_unavailable(self, state_machine, coordinator, browser, resolver, sink):
        resolver.unavailable = True
        await read_to_end(state_machine, browser)

        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[0].success is False

    @pytest.mark.asyncio
    async def test_found_without_url(self, state_machine, coordinator, browser, resolver, sink):
        resolver.resolution = NextPageResolution(next_link_found=True, next_link_url=None, reasoning="ambiguous")
        await read_to_end(state_machine, browser)

        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[0].reasoning == "ambiguous"

    @pytest.mark.asyncio
    async def test_concurrent_attempt_is_ignored(self, state_machine, coordinator, browser, resolver):
        coordinator._attempt_in_flight = True

        assert await coordinator.attempt(PAGE_ID) is False
        assert resolver.requests == []


class TestSuccessfulContinuation:

    @pytest.mark.asyncio
    async def test_parks_session_and_navigates(self, state_machine, coordinator, browser, found_next_page, sink, store):
        await read_to_end(state_machine, browser)

        assert state_machine.phase == SessionPhase.CONTINUING
        assert state_machine.session.chunks == []
        assert state_machine.session.is_active is True
        assert browser.navigations == [(PAGE_ID, NEXT_URL)]
        assert coordinator.pending_navigations[PAGE_ID].url == NEXT_URL

        [outcome] = outcomes(sink)
        assert outcome.success is True
        assert outcome.navigating is True
        assert outcome.reasoning == "The link text says next chapter"
        assert outcome.next_url == NEXT_URL

        persisted = await store.get(SESSION_KEY)
        assert persisted["chunks"] == []
        assert persisted["is_active"] is True
        coordinator.cancel_all()

    @pytest.mark.asyncio
    async def test_matching_load_starts_next_page(self, state_machine, coordinator, browser, found_next_page, sink):
        await read_to_end(state_machine, browser)
        browser.add_page(PAGE_ID, NEXT_URL, ["c", "d"])

        started = await coordinator.page_loaded(PAGE_ID, NEXT_URL + "#top")
        await settle(state_machine.prefetch)

        assert started is True
        assert coordinator.pending_navigations == {}
        session = state_machine.session
        assert session.chunks == ["c", "d"]
        assert session.cursor == 0
        assert session.auto_advance is True
        assert session.article_meta.source_url == NEXT_URL
        assert sink.of_type(ChunkReadyMessage)[-1].view.text == "c"

    @pytest.mark.asyncio
    async def test_different_url_discards_pending(self, state_machine, coordinator, browser, found_next_page, sink):
        await read_to_end(state_machine, browser)
        chunk_count = len(sink.of_type(ChunkReadyMessage))

        started = await coordinator.page_loaded(PAGE_ID, "https://example.com/unrelated")

        assert started is False
        assert coordinator.pending_navigations == {}
        assert state_machine.phase == SessionPhase.EMPTY
        assert state_machine.session.auto_advance is True
        assert len(sink.of_type(ChunkReadyMessage)) == chunk_count

    @pytest.mark.asyncio
    async def test_unrelated_page_load_is_ignored(self, state_machine, coordinator, browser, found_next_page):
        await read_to_end(state_machine, browser)

        assert await coordinator.page_loaded("page-2", NEXT_URL) is False
        assert state_machine.phase == SessionPhase.CONTINUING
        coordinator.cancel_all()

    @pytest.mark.asyncio
    async def test_pending_navigation_expires(
        self, state_machine, browser, resolver, sink, found_next_page
    ):
        coordinator = ContinuationCoordinator(
            state_machine=state_machine,
            extractor=browser,
            navigator=browser,
            resolver=resolver,
            presentation=sink,
            pending_timeout_seconds=0.01,
        )
        await read_to_end(state_machine, browser)
        assert state_machine.phase == SessionPhase.CONTINUING

        await asyncio.sleep(0.05)

        assert coordinator.pending_navigations == {}
        assert state_machine.phase == SessionPhase.EMPTY
        assert outcomes(sink)[-1].success is False
        assert outcomes(sink)[-1].next_url == NEXT_URL

    @pytest.mark.asyncio
    async def test_cancel_all(self, state_machine, coordinator, browser, found_next_page):
        await read_to_end(state_machine, browser)

        coordinator.cancel_all()

        assert coordinator.pending_navigations == {}
        assert coordinator._expiry_tasks == {}
