"""Session entities for the read-aloud engine."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .article import ArticleMeta
from .audio import AudioArtifact


class SessionPhase(str, Enum):
    """Derived lifecycle phase of the reading session."""
    EMPTY = "empty"
    PRESENTING = "presenting"
    PAUSED = "paused"
    CONTINUING = "continuing"


class PrefetchedAudio(BaseModel):
    """Look-ahead audio together with the chunk it was fetched for."""

    index: int = Field(ge=0)
    text: str
    audio: AudioArtifact


class SessionSnapshot(BaseModel):
    """Durable subset of a reading session.

    Presentation-only and in-flight fields are absent; they
    describe a live player that cannot survive a process restart.
    """

    chunks: list[str]
    article_meta: ArticleMeta = Field(default_factory=ArticleMeta)
    cursor: int = Field(ge=0)
    is_active: bool
    auto_advance: bool = False


class ReadingSession(BaseModel):
    """The single in-memory reading session."""

    chunks: list[str] = Field(default_factory=list)
    cursor: int = Field(default=0, ge=0)
    article_meta: ArticleMeta = Field(default_factory=ArticleMeta)
    is_active: bool = False
    is_presenting: bool = False
    auto_advance: bool = False
    prefetch: Optional[PrefetchedAudio] = None
    is_prefetch_in_flight: bool = False

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    @property
    def has_chunks(self) -> bool:
        return len(self.chunks) > 0

    @property
    def phase(self) -> SessionPhase:
        if not self.is_active:
            return SessionPhase.EMPTY
        if not self.chunks:
            # Parked while the source page navigates to its continuation.
            return SessionPhase.CONTINUING
        if self.is_presenting:
            return SessionPhase.PRESENTING
        return SessionPhase.PAUSED

    def to_snapshot(self) -> SessionSnapshot:
        """Project the durable fields of this session."""
        return SessionSnapshot(
            chunks=list(self.chunks),
            article_meta=self.article_meta.model_copy(deep=True),
            cursor=self.cursor,
            is_active=self.is_active,
            auto_advance=self.auto_advance,
        )

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "ReadingSession":
        """Rebuild a session from its snapshot with presentation fields at rest."""
        return cls(
            chunks=list(snapshot.chunks),
            cursor=snapshot.cursor,
            article_meta=snapshot.article_meta,
            is_active=snapshot.is_active,
            auto_advance=snapshot.auto_advance,
        )


class PendingNavigation(BaseModel):
    """A page expected to finish loading ``url`` and then continue reading."""

    page_id: str
    url: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
