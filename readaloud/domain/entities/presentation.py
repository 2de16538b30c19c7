"""Outward-facing projections of the reading session.

Every chunk-ready event and state query is derived here, from the session and
a chunk index, so the payload the player sees is computed in one place.
"""

from typing import Optional

from pydantic import BaseModel

from .article import ArticleMeta
from .reading_session import ReadingSession, SessionPhase

DEFAULT_TITLE = "Reading Page Content"


class ChunkPresentationView(BaseModel):
    """Everything the player needs to present one chunk."""

    text: str
    index: int
    total_chunks: int
    is_last: bool
    is_chunk: bool
    auto_advance: bool
    title: str
    article_meta: ArticleMeta

    @classmethod
    def from_session(cls, session: ReadingSession, index: int) -> "ChunkPresentationView":
        """Build the view of ``session.chunks[index]``.

        Raises:
            IndexError: If ``index`` is outside the chunk sequence.
        """
        if not 0 <= index < len(session.chunks):
            raise IndexError(f"Chunk index {index} out of range for {len(session.chunks)} chunks")

        return cls(
            text=session.chunks[index],
            index=index,
            total_chunks=len(session.chunks),
            is_last=index == len(session.chunks) - 1,
            is_chunk=len(session.chunks) > 1,
            auto_advance=session.auto_advance,
            title=session.article_meta.title or DEFAULT_TITLE,
            article_meta=session.article_meta,
        )


class SessionStateView(BaseModel):
    """Answer to a player's state query."""

    phase: SessionPhase
    is_active: bool
    is_presenting: bool
    auto_advance: bool
    cursor: int
    total_chunks: int
    chunks: list[str]
    article_meta: Optional[ArticleMeta] = None
    has_prefetch: bool = False

    @classmethod
    def from_session(cls, session: ReadingSession) -> "SessionStateView":
        return cls(
            phase=session.phase,
            is_active=session.is_active,
            is_presenting=session.is_presenting,
            auto_advance=session.auto_advance,
            cursor=session.cursor,
            total_chunks=len(session.chunks),
            chunks=list(session.chunks),
            article_meta=session.article_meta if session.is_active else None,
            has_prefetch=session.prefetch is not None,
        )
