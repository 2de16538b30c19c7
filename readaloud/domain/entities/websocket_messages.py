"""WebSocket message models for the read-aloud service."""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .presentation import ChunkPresentationView, SessionStateView


# ===== Client → Server Messages =====


class StartPageRequest(BaseModel):
    """Read the readable content of a browser page."""

    type: Literal["reader.start_page"] = "reader.start_page"
    page_id: str
    keep_auto_advance: bool = False


class StartSelectionRequest(BaseModel):
    """Read a text selection as a single chunk."""

    type: Literal["reader.start_selection"] = "reader.start_selection"
    text: str
    page_id: Optional[str] = None
    page_url: Optional[str] = None
    keep_auto_advance: bool = False


class AdvanceRequest(BaseModel):
    """The player finished the current chunk."""

    type: Literal["reader.advance"] = "reader.advance"


class JumpRequest(BaseModel):
    type: Literal["reader.jump"] = "reader.jump"
    index: int


class ResumeRequest(BaseModel):
    type: Literal["reader.resume"] = "reader.resume"
    index: int


class SetAutoAdvanceRequest(BaseModel):
    type: Literal["reader.set_auto_advance"] = "reader.set_auto_advance"
    enabled: bool


class QueryStateRequest(BaseModel):
    type: Literal["reader.query_state"] = "reader.query_state"


class ClearAllRequest(BaseModel):
    type: Literal["reader.clear_all"] = "reader.clear_all"


class PageLoaded(BaseModel):
    """A browser page finished loading a URL."""

    type: Literal["page.loaded"] = "page.loaded"
    page_id: str
    url: str


class PageResponse(BaseModel):
    """Browser answer to a :class:`PageRequest`."""

    type: Literal["page.response"] = "page.response"
    request_id: str
    ok: bool = True
    data: dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


# Union type for all client messages
ClientMessage = Annotated[
    Union[
        StartPageRequest,
        StartSelectionRequest,
        AdvanceRequest,
        JumpRequest,
        ResumeRequest,
        SetAutoAdvanceRequest,
        QueryStateRequest,
        ClearAllRequest,
        PageLoaded,
        PageResponse,
    ],
    Field(discriminator="type"),
]

client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


# ===== Server → Client Messages =====


class ChunkReady(BaseModel):
    """A chunk and its audio, ready to play."""

    type: Literal["chunk.ready"] = "chunk.ready"
    chunk: ChunkPresentationView
    audio_data_url: str


class ChunksFinished(BaseModel):
    type: Literal["chunks.finished"] = "chunks.finished"


class NavigationOutcome(BaseModel):
    """Result of an attempt to continue onto the next page."""

    type: Literal["navigation.outcome"] = "navigation.outcome"
    success: bool
    navigating: bool
    reasoning: Optional[str] = None
    next_url: Optional[str] = None


class AutoAdvanceChanged(BaseModel):
    type: Literal["auto_advance.changed"] = "auto_advance.changed"
    enabled: bool


class SessionState(BaseModel):
    type: Literal["session.state"] = "session.state"
    state: SessionStateView


class SessionCleared(BaseModel):
    type: Literal["session.cleared"] = "session.cleared"


class PageRequest(BaseModel):
    """Request for the browser to act on one of its pages."""

    type: Literal["page.request"] = "page.request"
    request_id: str
    action: Literal["extract_content", "extract_links", "get_url", "navigate"]
    page_id: str
    url: Optional[str] = None


class ErrorCode(str, Enum):
    """Error codes reported to the player."""

    CONTENT_UNAVAILABLE = "CONTENT_UNAVAILABLE"
    INVALID_INDEX = "INVALID_INDEX"
    NOTHING_TO_RESUME = "NOTHING_TO_RESUME"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    SOURCE_CHANGED = "SOURCE_CHANGED"
    LINK_EXTRACTION_FAILED = "LINK_EXTRACTION_FAILED"
    NO_NEXT_PAGE = "NO_NEXT_PAGE"
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_MESSAGE = "INVALID_MESSAGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    code: ErrorCode
    message: str
    reasoning: Optional[str] = None


# Union type for all server messages
ServerMessage = Union[
    ChunkReady,
    ChunksFinished,
    NavigationOutcome,
    AutoAdvanceChanged,
    SessionState,
    SessionCleared,
    PageRequest,
    ErrorMessage,
]
