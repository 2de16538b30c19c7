"""Recently-read history kept next to the session in durable storage."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..entities.audio import AudioArtifact
from ..entities.history import HistoryItem
from ..interfaces.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "tts_history"
MAX_HISTORY_ITEMS = 10


class HistoryService:
    """Keeps the most recent synthesized texts, newest first, one entry per text."""

    def __init__(self, store: KeyValueStore, max_items: int = MAX_HISTORY_ITEMS):
        self._store = store
        self.max_items = max_items

    async def list_items(self) -> list[HistoryItem]:
        try:
            raw_items = await self._store.get(HISTORY_KEY) or []
        except Exception as e:
            logger.error(f"Error loading history: {e}", exc_info=True)
            return []

        items = []
        for raw in raw_items:
            try:
                items.append(HistoryItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed history item: {e}")
        return items

    async def add(self, text: str, audio: AudioArtifact, title: Optional[str] = None) -> bool:
        """Record a synthesized text, replacing any older entry for the same text.

        Returns:
            bool: True if the history was saved.
        """
        item = HistoryItem(text=text, title=title or "Audio Snippet", audio_data_url=audio.to_data_url())
        history = [existing for existing in await self.list_items() if existing.text != text]
        history.insert(0, item)
        return await self._save(history[: self.max_items])

    async def remove(self, text: str) -> bool:
        history = [existing for existing in await self.list_items() if existing.text != text]
        return await self._save(history)

    async def clear(self) -> bool:
        return await self._save([])

    async def _save(self, history: list[HistoryItem]) -> bool:
        try:
            await self._store.set(HISTORY_KEY, [item.model_dump(mode="json") for item in history])
        except Exception as e:
            logger.error(f"Error saving history: {e}", exc_info=True)
            return False
        return True
