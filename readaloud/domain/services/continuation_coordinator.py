"""Auto-advance: find, navigate to and start reading the next page."""

import asyncio
import logging
from typing import Optional
from urllib.parse import urldefrag

from ..entities.article import NextPageRequest
from ..entities.messages import NavigationOutcomeMessage
from ..entities.reading_session import PendingNavigation, SessionPhase
from ..errors import (
    ContinuationError,
    ExtractionFailed,
    LinkExtractionFailed,
    NoNextPage,
    ReaderError,
    ServiceUnavailable,
    SourceChanged,
)
from ..interfaces.content_extractor import ContentExtractor
from ..interfaces.next_page_resolver import NextPageResolver
from ..interfaces.page_navigator import PageNavigator
from ..interfaces.presentation_sink import PresentationSink
from .session_state_machine import SessionStateMachine

logger = logging.getLogger(__name__)


def _normalize_url(url: Optional[str]) -> Optional[str]:
    if url is None:
        return None
    return urldefrag(url).url.rstrip("/")


class ContinuationCoordinator:
    """
    Drives cross-page continuation once the last chunk of a page is read.

    A successful attempt parks the session with no chunks, records a
    PendingNavigation and points the source page at the next URL. Reading
    resumes when the page reports it finished loading that URL.
    """

    def __init__(
        self,
        state_machine: SessionStateMachine,
        extractor: ContentExtractor,
        navigator: PageNavigator,
        resolver: NextPageResolver,
        presentation: PresentationSink,
        pending_timeout_seconds: Optional[float] = 60.0,
    ):
        self.state_machine = state_machine
        self.extractor = extractor
        self.navigator = navigator
        self.resolver = resolver
        self.presentation = presentation
        self.pending_timeout_seconds = pending_timeout_seconds

        self.pending_navigations: dict[str, PendingNavigation] = {}
        self._expiry_tasks: dict[str, asyncio.Task] = {}
        self._attempt_in_flight = False

        state_machine.continuation = self

    async def attempt(self, page_id: str) -> bool:
        """Try to continue reading on the page after ``page_id``.

        Returns:
            bool: True if navigation to a next page was started.
        """
        if self._attempt_in_flight:
            logger.info(f"Continuation already in progress, ignoring request for page {page_id}")
            return False

        self._attempt_in_flight = True
        sm = self.state_machine
        meta = sm.session.article_meta
        try:
            next_url, reasoning = await self._resolve(page_id, meta.source_url, meta.title)
            if sm.session.article_meta is not meta:
                logger.info("Session changed while resolving the next page, dropping continuation")
                return False
            await self._arm(page_id, next_url, reasoning)
            return True
        except ContinuationError as e:
            if sm.session.article_meta is not meta and sm.session.phase != SessionPhase.CONTINUING:
                logger.info(f"Continuation failed after the session changed: {e.detail}")
                return False
            logger.warning(f"Continuation for page {page_id} failed: {e.detail}")
            self._discard(page_id)
            await sm.reset_session()
            self.presentation.send(
                NavigationOutcomeMessage(
                    success=False,
                    navigating=False,
                    reasoning=e.reasoning or e.detail,
                )
            )
            return False
        finally:
            self._attempt_in_flight = False

    async def _resolve(self, page_id: str, source_url: Optional[str], title: Optional[str]) -> tuple[str, Optional[str]]:
        current_url = await self.navigator.get_page_url(page_id)
        if current_url is None or _normalize_url(current_url) != _normalize_url(source_url):
            raise SourceChanged(
                "Page was closed or its URL changed since reading started.",
                reasoning="The page is no longer showing the article that was read.",
            )

        try:
            candidates = await self.extractor.extract_candidate_links(page_id)
        except ExtractionFailed as e:
            raise LinkExtractionFailed(
                f"Could not extract links from the page: {e.detail}",
                reasoning="Links could not be read from the current page.",
            ) from e

        request = NextPageRequest(
            current_url=candidates.current_url or current_url,
            current_title=candidates.current_title or title or "",
            links=candidates.links,
        )
        logger.info(f"Resolving next page among {len(request.links)} links of {request.current_url}")

        try:
            resolution = await self.resolver.resolve_next_page(request)
        except ServiceUnavailable as e:
            raise NoNextPage(
                f"Next page service failed: {e.detail}",
                reasoning=e.reasoning or e.detail,
            ) from e

        if not resolution.success or not resolution.next_link_found or not resolution.next_link_url:
            raise NoNextPage(
                "No next page link was found.",
                reasoning=resolution.reasoning or "Next page service found no link.",
            )

        logger.info(f"Next page resolved to {resolution.next_link_url}")
        return resolution.next_link_url, resolution.reasoning

    async def _arm(self, page_id: str, next_url: str, reasoning: Optional[str]) -> None:
        self._discard(page_id)
        self.pending_navigations[page_id] = PendingNavigation(page_id=page_id, url=next_url)
        await self.state_machine.park_for_navigation()

        self.presentation.send(
            NavigationOutcomeMessage(success=True, navigating=True, reasoning=reasoning, next_url=next_url)
        )

        if self.pending_timeout_seconds:
            self._expiry_tasks[page_id] = asyncio.create_task(self._expire(page_id, self.pending_timeout_seconds))

        try:
            await self.navigator.navigate(page_id, next_url)
        except ReaderError as e:
            raise NoNextPage(f"Navigation to {next_url} failed: {e.detail}", reasoning=e.reasoning) from e

    async def page_loaded(self, page_id: str, url: str) -> bool:
        """Handle a page-load-complete event.

        Returns:
            bool: True if a new reading session was started on the page.
        """
        pending = self.pending_navigations.get(page_id)
        if pending is None:
            return False

        self._discard(page_id)
        sm = self.state_machine

        if _normalize_url(url) != _normalize_url(pending.url):
            logger.info(f"Page {page_id} loaded {url} instead of {pending.url}, dropping continuation")
            if sm.phase == SessionPhase.CONTINUING:
                await sm.reset_session()
            return False

        logger.info(f"Page {page_id} finished loading {url}, continuing to read")
        try:
            await sm.start_for_page(page_id, continue_prior_auto_advance=True)
        except ReaderError:
            if sm.phase == SessionPhase.CONTINUING:
                await sm.reset_session()
            raise
        return True

    def cancel_all(self) -> None:
        for task in self._expiry_tasks.values():
            task.cancel()
        self._expiry_tasks.clear()
        self.pending_navigations.clear()

    async def _expire(self, page_id: str, timeout: float) -> None:
        await asyncio.sleep(timeout)
        self._expiry_tasks.pop(page_id, None)
        pending = self.pending_navigations.pop(page_id, None)
        if pending is None:
            return

        logger.warning(f"Navigation of page {page_id} to {pending.url} did not complete within {timeout}s")
        if self.state_machine.phase == SessionPhase.CONTINUING:
            await self.state_machine.reset_session()
        self.presentation.send(
            NavigationOutcomeMessage(
                success=False,
                navigating=False,
                reasoning="The next page did not finish loading in time.",
                next_url=pending.url,
            )
        )

    def _discard(self, page_id: str) -> None:
        self.pending_navigations.pop(page_id, None)
        task = self._expiry_tasks.pop(page_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()
