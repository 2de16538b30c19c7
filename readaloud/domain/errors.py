"""Domain exceptions for reading sessions and their collaborators."""

from typing import Optional

from .entities.websocket_messages import ErrorCode


class ReaderError(RuntimeError):
    """Base class for errors reported to the player."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, detail: str, *, reasoning: Optional[str] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.reasoning = reasoning


class ContentUnavailable(ReaderError):
    """Raised when a page is restricted or yields no readable chunks."""

    code = ErrorCode.CONTENT_UNAVAILABLE


class InvalidIndex(ReaderError):
    code = ErrorCode.INVALID_INDEX


class NothingToResume(ReaderError):
    code = ErrorCode.NOTHING_TO_RESUME


class NoActiveSession(ReaderError):
    code = ErrorCode.NO_ACTIVE_SESSION


class SynthesisFailed(ReaderError):
    """Raised when the synthesis service fails or returns empty audio."""

    code = ErrorCode.SYNTHESIS_FAILED


class ExtractionFailed(ReaderError):
    """Raised by the content-extraction collaborator."""

    code = ErrorCode.EXTRACTION_FAILED


class ServiceUnavailable(ReaderError):
    """Raised when a remote service answers with a failure."""

    code = ErrorCode.SERVICE_UNAVAILABLE


class ContinuationError(ReaderError):
    """Base class for errors that abort a continuation attempt."""


class SourceChanged(ContinuationError):
    code = ErrorCode.SOURCE_CHANGED


class LinkExtractionFailed(ContinuationError):
    code = ErrorCode.LINK_EXTRACTION_FAILED


class NoNextPage(ContinuationError):
    code = ErrorCode.NO_NEXT_PAGE
