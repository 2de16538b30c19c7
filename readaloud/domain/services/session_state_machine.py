"""Session state machine: the single owner of the reading session."""

import html
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from ..entities.article import ArticleMeta
from ..entities.audio import AudioArtifact
from ..entities.messages import (
    AllChunksFinishedMessage,
    AutoAdvanceChangedMessage,
    ChunkReadyMessage,
    SessionClearedMessage,
)
from ..entities.presentation import ChunkPresentationView, SessionStateView
from ..entities.reading_session import ReadingSession, SessionPhase
from ..errors import (
    ContentUnavailable,
    ExtractionFailed,
    InvalidIndex,
    NoActiveSession,
    NothingToResume,
    SynthesisFailed,
)
from ..interfaces.content_extractor import ContentExtractor
from ..interfaces.page_navigator import PageNavigator
from ..interfaces.presentation_sink import PresentationSink
from ..interfaces.speech_synthesizer import SpeechSynthesizer
from .history_service import HistoryService
from .persistence_gateway import PersistenceGateway
from .prefetch_cache import PrefetchCache

if TYPE_CHECKING:
    from .continuation_coordinator import ContinuationCoordinator

logger = logging.getLogger(__name__)

TITLE_SNIPPET_LENGTH = 400
EXCERPT_LENGTH = 150
DEFAULT_PAGE_TITLE = "Page Content"
DEFAULT_RESTRICTED_URL_PREFIXES = (
    "chrome://",
    "chrome-extension://",
    "edge://",
    "about:",
    "https://chrome.google.com/webstore",
)


def _snippet(text: str, length: int) -> str:
    return text[:length] + ("..." if len(text) > length else "")


class SessionStateMachine:
    """
    Owns the reading session and every transition on it.

    All mutation of the session goes through this class so its invariants
    hold at one boundary:
    - a session without chunks is inactive, except while parked for a
      continuation;
    - the prefetch slot only ever holds audio for ``cursor + 1``;
    - every change to chunks, cursor, activity or auto-advance is persisted
      before the matching chunk is emitted.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        prefetch: PrefetchCache,
        synthesizer: SpeechSynthesizer,
        extractor: ContentExtractor,
        navigator: PageNavigator,
        presentation: PresentationSink,
        history: Optional[HistoryService] = None,
        restricted_url_prefixes: Iterable[str] = DEFAULT_RESTRICTED_URL_PREFIXES,
        session: Optional[ReadingSession] = None,
    ):
        self.session: ReadingSession = session or ReadingSession()
        self.gateway = gateway
        self.prefetch = prefetch
        self.synthesizer = synthesizer
        self.extractor = extractor
        self.navigator = navigator
        self.presentation = presentation
        self.history = history
        self.restricted_url_prefixes = tuple(restricted_url_prefixes)

        # Set by ContinuationCoordinator when it is wired to this machine
        self.continuation: Optional["ContinuationCoordinator"] = None

    @property
    def phase(self) -> SessionPhase:
        return self.session.phase

    async def restore(self) -> ReadingSession:
        """Replace the in-memory session with the persisted one."""
        self.prefetch.invalidate(self.session)
        self.session = await self.gateway.load()
        return self.session

    # ===== Starting sessions =====

    async def start(
        self,
        chunks: list[str],
        article_meta: ArticleMeta,
        continue_prior_auto_advance: bool = False,
    ) -> ReadingSession:
        """Install a new chunk sequence at cursor 0.

        The previous session is cleared from storage before the new one is
        written, so a crash in between leaves nothing half-installed.

        Raises:
            ContentUnavailable: If there are no non-blank chunks.
        """
        chunks = [chunk for chunk in chunks if chunk and chunk.strip()]
        if not chunks:
            raise ContentUnavailable("No readable content found to read aloud.")

        auto_advance = self.session.auto_advance if continue_prior_auto_advance else False

        await self.gateway.clear()
        self._reset_in_memory(auto_advance=auto_advance)

        self.session.chunks = chunks
        self.session.article_meta = article_meta
        self.session.cursor = 0
        self.session.is_active = True
        await self.gateway.save(self.session)

        logger.info(
            f"Started session '{article_meta.title}' with {len(chunks)} chunks "
            f"(auto-advance {'on' if auto_advance else 'off'})"
        )
        return self.session

    async def start_for_page(self, page_id: str, continue_prior_auto_advance: bool = False) -> None:
        """Read the readable content of a browser page from its first chunk.

        Raises:
            ContentUnavailable: If the page is gone, restricted, or yields no chunks.
        """
        url = await self.navigator.get_page_url(page_id)
        if url is None:
            raise ContentUnavailable(f"Page {page_id} was not found.")
        if self._is_restricted(url):
            raise ContentUnavailable("Cannot extract content from restricted pages.")

        try:
            content = await self.extractor.extract_readable_content(page_id)
        except ExtractionFailed as e:
            raise ContentUnavailable(f"Could not extract readable content: {e.detail}") from e

        chunks = [chunk for chunk in content.text_chunks if chunk and chunk.strip()]
        title = content.title
        if not title:
            title = _snippet(chunks[0], TITLE_SNIPPET_LENGTH) if chunks else DEFAULT_PAGE_TITLE

        meta = ArticleMeta(
            title=title,
            source_page_id=page_id,
            source_url=url,
            excerpt=content.excerpt,
            simplified_content=content.simplified_content,
            length=content.length,
        )
        await self.start(chunks, meta, continue_prior_auto_advance=continue_prior_auto_advance)
        await self.dispatch_current()
        await self.prefetch.try_fill(self.session)

    async def start_for_selection(
        self,
        text: str,
        page_id: Optional[str] = None,
        page_url: Optional[str] = None,
        continue_prior_auto_advance: bool = False,
    ) -> None:
        """Read a text selection as a single chunk.

        Raises:
            ContentUnavailable: If the selection is blank.
        """
        selected = (text or "").strip()
        if not selected:
            raise ContentUnavailable("No text selected.")

        paragraphs = "</p><p>".join(html.escape(line) for line in selected.split("\n"))
        meta = ArticleMeta(
            title=_snippet(selected, TITLE_SNIPPET_LENGTH),
            source_page_id=page_id,
            source_url=page_url,
            excerpt=_snippet(selected, EXCERPT_LENGTH),
            simplified_content=f"<p>{paragraphs}</p>",
            length=len(selected),
        )
        await self.start([selected], meta, continue_prior_auto_advance=continue_prior_auto_advance)
        await self.dispatch_current()

    # ===== Chunk delivery =====

    async def dispatch_current(self, audio: Optional[AudioArtifact] = None) -> None:
        """Present the chunk at the cursor, fetching its audio if not supplied.

        Raises:
            NoActiveSession: If no session is active.
            SynthesisFailed: If the audio cannot be fetched; the session is reset.
        """
        session = self.session
        if not session.is_active:
            raise NoActiveSession("No active reading session.")
        if session.cursor >= len(session.chunks):
            await self.finish()
            return

        index = session.cursor
        text = session.chunks[index]
        session.is_presenting = True
        await self.gateway.save(session)

        logger.info(f"Dispatching chunk {index + 1}/{len(session.chunks)}: \"{text[:50]}...\"")

        if audio is None:
            audio = await self._fetch_audio(text)

        if self.session is not session or session.cursor != index or not session.is_active:
            logger.info(f"Chunk index {index} was superseded while its audio was fetched")
            return

        view = ChunkPresentationView.from_session(session, index)
        if not self.presentation.send(ChunkReadyMessage(view=view, audio=audio)):
            logger.warning(f"No player attached for chunk index {index}, marking session paused")
            session.is_presenting = False
            await self.gateway.save(session)

    async def advance(self) -> None:
        """Move on after the current chunk finished playing.

        Raises:
            NoActiveSession: If no session with chunks is active.
        """
        session = self.session
        if not session.is_active or not session.chunks:
            raise NoActiveSession("No active reading session to advance.")

        next_index = session.cursor + 1
        if next_index >= len(session.chunks):
            logger.info("All chunks finished")
            await self.finish()
            return

        session.cursor = next_index
        audio = await self.prefetch.consume(session)
        await self.dispatch_current(audio=audio)
        await self.prefetch.try_fill(self.session)

    async def jump(self, target_index: int) -> None:
        """Present an arbitrary chunk of the active session.

        Raises:
            InvalidIndex: If no session is active or the index is out of range.
        """
        session = self.session
        if not session.is_active or not 0 <= target_index < len(session.chunks):
            raise InvalidIndex(
                f"Cannot jump to chunk {target_index}: no active session or invalid chunk index."
            )

        logger.info(f"Jumping to chunk index {target_index}")
        session.cursor = target_index
        self.prefetch.invalidate(session)
        await self.dispatch_current()
        await self.prefetch.try_fill(self.session)

    async def resume(self, from_index: int) -> None:
        """Re-activate a paused or reloaded session at ``from_index``.

        Raises:
            NothingToResume: If there are no chunks or the index is out of range.
        """
        session = self.session
        if not session.chunks or not 0 <= from_index < len(session.chunks):
            raise NothingToResume("No valid session to resume or invalid index.")

        logger.info(f"Resuming session from chunk index {from_index}")
        session.is_active = True
        session.cursor = from_index
        self.prefetch.invalidate(session)
        await self.dispatch_current()
        await self.prefetch.try_fill(self.session)

    async def finish(self) -> None:
        """Handle the end of the chunk sequence.

        Hands off to the continuation coordinator when auto-advance is on and
        the session knows its source page; otherwise resets the session.
        """
        session = self.session
        self.presentation.send(AllChunksFinishedMessage())

        page_id = session.article_meta.source_page_id
        if session.auto_advance and page_id and self.continuation is not None:
            logger.info(f"Auto-advance enabled, looking for the page after {page_id}")
            session.is_presenting = False
            await self.continuation.attempt(page_id)
            return

        await self.reset_session()

    # ===== Preferences and lifecycle =====

    async def set_auto_advance(self, enabled: bool) -> None:
        self.session.auto_advance = enabled
        await self.gateway.save(self.session)
        self.presentation.send(AutoAdvanceChangedMessage(enabled=enabled))
        logger.info(f"Auto-advance {'enabled' if enabled else 'disabled'}")

    async def presentation_closed(self) -> None:
        """Mark the session paused; it may be resumed by a new player."""
        self.session.is_presenting = False
        if self.session.is_active:
            await self.gateway.save(self.session)
            logger.info("Session marked as paused because the player closed")

    async def park_for_navigation(self) -> None:
        """Clear the chunks but keep the session active while the page navigates."""
        self.prefetch.invalidate(self.session)
        self.session.chunks = []
        self.session.cursor = 0
        self.session.is_presenting = False
        self.session.is_active = True
        await self.gateway.save(self.session)

    async def reset_session(self) -> None:
        """Return to the empty session, keeping the auto-advance preference."""
        logger.info("Resetting reading session")
        self._reset_in_memory(auto_advance=self.session.auto_advance)
        await self.gateway.save(self.session)

    async def clear_all(self) -> None:
        """Discard the session, the auto-advance preference and the audio cache."""
        logger.info("Clearing all reading data")
        if self.continuation is not None:
            self.continuation.cancel_all()
        self._reset_in_memory(auto_advance=False)
        await self.gateway.clear_all()
        self.presentation.send(SessionClearedMessage())

    def query_state(self) -> SessionStateView:
        return SessionStateView.from_session(self.session)

    # ===== Helpers =====

    async def _fetch_audio(self, text: str) -> AudioArtifact:
        """Audio for ``text`` from the cache, or from the synthesizer."""
        cached = await self.gateway.get_cached_audio(text)
        if cached is not None:
            logger.debug("Using cached audio for chunk")
            return cached

        try:
            audio = await self.synthesizer.synthesize(text)
            if audio.size == 0:
                raise SynthesisFailed("Fetched audio is not valid or is empty.")
        except SynthesisFailed as e:
            logger.error(f"Synthesis failed, resetting session: {e.detail}")
            await self.reset_session()
            raise

        await self.gateway.put_cached_audio(text, audio)
        if self.history is not None:
            await self.history.add(text, audio, title=self.session.article_meta.title or None)
        return audio

    def _reset_in_memory(self, auto_advance: bool) -> None:
        self.prefetch.invalidate(self.session)
        self.session.chunks = []
        self.session.cursor = 0
        self.session.article_meta = ArticleMeta()
        self.session.is_active = False
        self.session.is_presenting = False
        self.session.auto_advance = auto_advance

    def _is_restricted(self, url: str) -> bool:
        return any(url.startswith(prefix) for prefix in self.restricted_url_prefixes)
