"""Outbound message entities."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal, Optional

from .audio import AudioArtifact
from .presentation import ChunkPresentationView, SessionStateView
from .websocket_messages import (
    AutoAdvanceChanged,
    ChunkReady,
    ChunksFinished,
    ErrorCode,
    ErrorMessage,
    NavigationOutcome,
    PageRequest,
    ServerMessage,
    SessionCleared,
    SessionState,
)


class OutboundMessage(ABC):
    """Base class for outbound messages."""

    @abstractmethod
    def to_wire(self) -> ServerMessage:
        """Build the wire model sent to the player."""


@dataclass
class ChunkReadyMessage(OutboundMessage):
    """Message carrying a chunk and its audio."""

    view: ChunkPresentationView
    audio: AudioArtifact
    chunk_ready: ChunkReady = field(init=False)

    def __post_init__(self):
        self.chunk_ready = ChunkReady(chunk=self.view, audio_data_url=self.audio.to_data_url())

    def to_wire(self) -> ServerMessage:
        return self.chunk_ready


@dataclass
class AllChunksFinishedMessage(OutboundMessage):
    """Message indicating the last chunk has been played."""

    def to_wire(self) -> ServerMessage:
        return ChunksFinished()


@dataclass
class ErrorOutMessage(OutboundMessage):
    """Message containing an error."""

    code: ErrorCode
    message: str
    reasoning: Optional[str] = None
    error: ErrorMessage = field(init=False)

    def __post_init__(self):
        self.error = ErrorMessage(code=self.code, message=self.message, reasoning=self.reasoning)

    def to_wire(self) -> ServerMessage:
        return self.error


@dataclass
class NavigationOutcomeMessage(OutboundMessage):
    """Message reporting whether a continuation is under way."""

    success: bool
    navigating: bool
    reasoning: Optional[str] = None
    next_url: Optional[str] = None
    outcome: NavigationOutcome = field(init=False)

    def __post_init__(self):
        self.outcome = NavigationOutcome(
            success=self.success,
            navigating=self.navigating,
            reasoning=self.reasoning,
            next_url=self.next_url,
        )

    def to_wire(self) -> ServerMessage:
        return self.outcome


@dataclass
class AutoAdvanceChangedMessage(OutboundMessage):
    enabled: bool

    def to_wire(self) -> ServerMessage:
        return AutoAdvanceChanged(enabled=self.enabled)


@dataclass
class SessionStateMessage(OutboundMessage):
    state: SessionStateView

    def to_wire(self) -> ServerMessage:
        return SessionState(state=self.state)


@dataclass
class SessionClearedMessage(OutboundMessage):
    def to_wire(self) -> ServerMessage:
        return SessionCleared()


@dataclass
class PageRequestMessage(OutboundMessage):
    """Message asking the browser to act on one of its pages."""

    request_id: str
    action: Literal["extract_content", "extract_links", "get_url", "navigate"]
    page_id: str
    url: Optional[str] = None

    def to_wire(self) -> ServerMessage:
        return PageRequest(
            request_id=self.request_id,
            action=self.action,
            page_id=self.page_id,
            url=self.url,
        )
