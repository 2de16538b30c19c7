"""Recently-read history entities."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class HistoryItem(BaseModel):
    """A previously synthesized text and its audio."""

    text: str
    title: str = "Audio Snippet"
    audio_data_url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
