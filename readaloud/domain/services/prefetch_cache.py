"""Single-slot look-ahead audio cache."""

import asyncio
import logging
from typing import Optional

from ..entities.audio import AudioArtifact
from ..entities.reading_session import PrefetchedAudio, ReadingSession
from ..interfaces.speech_synthesizer import SpeechSynthesizer
from .persistence_gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class PrefetchCache:
    """
    Holds at most one pre-synthesized artifact, for the chunk after the cursor.

    The slot itself lives on the session (``session.prefetch``); this class
    owns the fetch task that fills it. Prefetching is an optimization only:
    its failures are logged and never reach the player.
    """

    def __init__(self, synthesizer: SpeechSynthesizer, gateway: PersistenceGateway):
        self._synthesizer = synthesizer
        self._gateway = gateway
        self._task: Optional[asyncio.Task] = None
        self._target_index: Optional[int] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        """The fetch currently in flight, if any."""
        return self._task

    async def try_fill(self, session: ReadingSession) -> Optional[asyncio.Task]:
        """Start filling the slot for ``cursor + 1``.

        Returns:
            The fetch task when a synthesis request was issued, otherwise None.
        """
        if session.is_prefetch_in_flight or not session.is_active:
            return None

        index = session.cursor + 1
        if index >= len(session.chunks):
            session.prefetch = None
            return None

        text = session.chunks[index]
        if session.prefetch is not None and session.prefetch.index == index and session.prefetch.text == text:
            return None

        cached = await self._gateway.get_cached_audio(text)
        if not self._targets(session, index, text):
            return None

        if cached is not None:
            logger.info(f"Audio for next chunk (index {index}) already cached, skipping prefetch")
            session.prefetch = PrefetchedAudio(index=index, text=text, audio=cached)
            return None

        if session.is_prefetch_in_flight:
            return None

        logger.info(f"Prefetching audio for chunk index {index}")
        session.prefetch = None
        session.is_prefetch_in_flight = True
        self._target_index = index
        self._task = asyncio.create_task(self._fill(session, index, text))
        return self._task

    async def consume(self, session: ReadingSession) -> Optional[AudioArtifact]:
        """Take the prefetched audio for ``session.cursor``, if any.

        A fetch still in flight for the cursor is awaited rather than
        duplicated. The slot is always empty afterwards.
        """
        task = self._task
        if task is not None and not task.done() and self._target_index == session.cursor:
            logger.info(f"Waiting for in-flight prefetch of chunk index {session.cursor}")
            await asyncio.wait({task})
            session.prefetch = None
            if task.cancelled():
                return None
            return task.result()

        slot = session.prefetch
        session.prefetch = None
        if slot is None or not self._matches(session, slot.index, slot.text):
            return None

        logger.info(f"Using prefetched audio for chunk index {slot.index}")
        return slot.audio

    def invalidate(self, session: ReadingSession) -> None:
        """Drop the slot and cancel any fetch in flight."""
        if self._task is not None and not self._task.done():
            logger.debug(f"Cancelling prefetch of chunk index {self._target_index}")
            self._task.cancel()
        self._task = None
        self._target_index = None
        session.prefetch = None
        session.is_prefetch_in_flight = False

    async def _fill(self, session: ReadingSession, index: int, text: str) -> Optional[AudioArtifact]:
        task = asyncio.current_task()
        try:
            audio = await self._synthesizer.synthesize(text)
        except Exception as e:
            logger.warning(f"Prefetch failed for chunk index {index}: {e}")
            return None
        finally:
            if self._task is task:
                session.is_prefetch_in_flight = False
                self._task = None
                self._target_index = None

        if audio.size == 0:
            logger.warning(f"Prefetch for chunk index {index} returned empty audio")
            return None

        if self._targets(session, index, text):
            session.prefetch = PrefetchedAudio(index=index, text=text, audio=audio)
            logger.info(f"Prefetched audio for chunk index {index}")
        else:
            logger.debug(f"Prefetched chunk index {index} is no longer next, keeping it for the caller only")
        return audio

    @staticmethod
    def _targets(session: ReadingSession, index: int, text: str) -> bool:
        """Whether ``index``/``text`` is still the chunk after the cursor."""
        return session.is_active and session.cursor + 1 == index and PrefetchCache._matches_text(session, index, text)

    @staticmethod
    def _matches(session: ReadingSession, index: int, text: str) -> bool:
        return session.cursor == index and PrefetchCache._matches_text(session, index, text)

    @staticmethod
    def _matches_text(session: ReadingSession, index: int, text: str) -> bool:
        return index < len(session.chunks) and session.chunks[index] == text
