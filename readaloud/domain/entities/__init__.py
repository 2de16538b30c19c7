"""Domain entities for the read-aloud service."""

from .article import (
    ArticleMeta,
    CandidateLink,
    CandidateLinks,
    ExtractedContent,
    NextPageRequest,
    NextPageResolution,
)
from .audio import AudioArtifact
from .events import (
    AdvanceEvent,
    ClearAllEvent,
    InboundEvent,
    JumpEvent,
    PageLoadedEvent,
    PresentationClosedEvent,
    QueryStateEvent,
    ResumeEvent,
    SetAutoAdvanceEvent,
    StartPageEvent,
    StartSelectionEvent,
)
from .history import HistoryItem
from .messages import (
    AllChunksFinishedMessage,
    AutoAdvanceChangedMessage,
    ChunkReadyMessage,
    ErrorOutMessage,
    NavigationOutcomeMessage,
    OutboundMessage,
    PageRequestMessage,
    SessionClearedMessage,
    SessionStateMessage,
)
from .presentation import ChunkPresentationView, SessionStateView
from .reading_session import (
    PendingNavigation,
    PrefetchedAudio,
    ReadingSession,
    SessionPhase,
    SessionSnapshot,
)
from .websocket_messages import ClientMessage, ErrorCode, ServerMessage, client_message_adapter

__all__ = [
    # Session entities
    "ReadingSession",
    "SessionPhase",
    "SessionSnapshot",
    "PrefetchedAudio",
    "PendingNavigation",
    # Article entities
    "ArticleMeta",
    "ExtractedContent",
    "CandidateLink",
    "CandidateLinks",
    "NextPageRequest",
    "NextPageResolution",
    # Audio and history entities
    "AudioArtifact",
    "HistoryItem",
    # Projections
    "ChunkPresentationView",
    "SessionStateView",
    # Event entities
    "InboundEvent",
    "StartPageEvent",
    "StartSelectionEvent",
    "AdvanceEvent",
    "JumpEvent",
    "ResumeEvent",
    "SetAutoAdvanceEvent",
    "QueryStateEvent",
    "ClearAllEvent",
    "PageLoadedEvent",
    "PresentationClosedEvent",
    # Message entities
    "OutboundMessage",
    "ChunkReadyMessage",
    "AllChunksFinishedMessage",
    "ErrorOutMessage",
    "NavigationOutcomeMessage",
    "AutoAdvanceChangedMessage",
    "SessionStateMessage",
    "SessionClearedMessage",
    "PageRequestMessage",
    # WebSocket message entities
    "ClientMessage",
    "ServerMessage",
    "ErrorCode",
    "client_message_adapter",
]
