"""Persistence of the reading session, the auto-advance preference and the audio cache."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..entities.audio import AudioArtifact
from ..entities.reading_session import ReadingSession, SessionSnapshot
from ..interfaces.key_value_store import KeyValueStore
from .audio_cache_key import AUDIO_CACHE_PREFIX, audio_cache_key

logger = logging.getLogger(__name__)

SESSION_KEY = "persisted_tts_session"
AUTO_ADVANCE_KEY = "auto_advance_enabled"


class PersistenceGateway:
    """
    Reads and writes the durable state shared across process restarts.

    The gateway never raises on storage failures: the in-memory session stays
    authoritative until the next successful save, and a failed load falls back
    to an empty session.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    # ===== Session snapshot =====

    async def save(self, session: ReadingSession) -> None:
        """Persist the durable fields of ``session``.

        A session that is neither active nor holds chunks is never stored;
        the persisted snapshot is cleared instead. The auto-advance preference
        is written either way.
        """
        await self.save_auto_advance(session.auto_advance)

        if not session.is_active and not session.chunks:
            await self.clear()
            return

        snapshot = session.to_snapshot()
        try:
            await self._store.set(SESSION_KEY, snapshot.model_dump(mode="json"))
            logger.debug(
                f"Saved session snapshot: cursor {snapshot.cursor}, "
                f"{len(snapshot.chunks)} chunks, active={snapshot.is_active}"
            )
        except Exception as e:
            logger.error(f"Error saving session to storage: {e}", exc_info=True)

    async def load(self) -> ReadingSession:
        """Load the persisted session, or a fresh one if nothing usable is stored."""
        auto_advance = await self._load_auto_advance()

        try:
            raw = await self._store.get(SESSION_KEY)
        except Exception as e:
            logger.error(f"Error loading session from storage: {e}", exc_info=True)
            return ReadingSession(auto_advance=auto_advance)

        if raw is None:
            logger.info("No persisted session found in storage")
            return ReadingSession(auto_advance=auto_advance)

        try:
            snapshot = SessionSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding malformed persisted session: {e}")
            return ReadingSession(auto_advance=auto_advance)

        if not snapshot.chunks or snapshot.cursor >= len(snapshot.chunks):
            logger.warning(
                f"Discarding persisted session with cursor {snapshot.cursor} "
                f"and {len(snapshot.chunks)} chunks"
            )
            return ReadingSession(auto_advance=auto_advance)

        session = ReadingSession.from_snapshot(snapshot)
        logger.info(
            f"Loaded persisted session: cursor {session.cursor}, "
            f"{len(session.chunks)} chunks, active={session.is_active}"
        )
        return session

    async def clear(self) -> None:
        """Remove the persisted session snapshot."""
        logger.info("Clearing persisted session from storage")
        try:
            await self._store.remove([SESSION_KEY])
        except Exception as e:
            logger.error(f"Error clearing session from storage: {e}", exc_info=True)

    # ===== Auto-advance preference =====

    async def save_auto_advance(self, enabled: bool) -> None:
        try:
            await self._store.set(AUTO_ADVANCE_KEY, enabled)
        except Exception as e:
            logger.error(f"Error saving auto-advance preference: {e}", exc_info=True)

    async def _load_auto_advance(self) -> bool:
        try:
            value = await self._store.get(AUTO_ADVANCE_KEY)
        except Exception as e:
            logger.error(f"Error loading auto-advance preference: {e}", exc_info=True)
            return False
        return value is True

    # ===== Audio cache =====

    async def get_cached_audio(self, text: str) -> Optional[AudioArtifact]:
        """Look up cached audio for a chunk of text."""
        key = audio_cache_key(text)
        try:
            value = await self._store.get(key)
        except Exception as e:
            logger.error(f"Error reading audio cache: {e}", exc_info=True)
            return None

        if value is None:
            return None

        try:
            return AudioArtifact.from_data_url(value)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable audio cache entry: {e}")
            return None

    async def put_cached_audio(self, text: str, audio: AudioArtifact) -> None:
        try:
            await self._store.set(audio_cache_key(text), audio.to_data_url())
        except Exception as e:
            logger.error(f"Error writing audio cache: {e}", exc_info=True)

    async def purge_audio_cache(self) -> int:
        """Remove every cached audio entry.

        Returns:
            int: The number of entries removed.
        """
        try:
            keys = await self._store.keys_with_prefix(AUDIO_CACHE_PREFIX)
            if keys:
                await self._store.remove(keys)
        except Exception as e:
            logger.error(f"Error clearing audio cache: {e}", exc_info=True)
            return 0

        logger.info(f"Cleared {len(keys)} audio cache items")
        return len(keys)

    async def clear_all(self) -> None:
        """Remove the session, the auto-advance preference and the audio cache."""
        await self.clear()
        try:
            await self._store.remove([AUTO_ADVANCE_KEY])
        except Exception as e:
            logger.error(f"Error clearing auto-advance preference: {e}", exc_info=True)
        await self.purge_audio_cache()
