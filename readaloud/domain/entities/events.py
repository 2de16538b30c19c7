"""Inbound event entities for the reading session."""

from dataclasses import dataclass
from typing import Optional


class InboundEvent:
    """Base class for inbound events."""

    pass


@dataclass
class StartPageEvent(InboundEvent):
    """Event to read the readable content of a page."""

    page_id: str
    continue_prior_auto_advance: bool = False


@dataclass
class StartSelectionEvent(InboundEvent):
    """Event to read a text selection."""

    text: str
    page_id: Optional[str] = None
    page_url: Optional[str] = None
    continue_prior_auto_advance: bool = False


@dataclass
class AdvanceEvent(InboundEvent):
    """Event raised when the player finishes the current chunk."""

    pass


@dataclass
class JumpEvent(InboundEvent):
    index: int


@dataclass
class ResumeEvent(InboundEvent):
    index: int


@dataclass
class SetAutoAdvanceEvent(InboundEvent):
    enabled: bool


@dataclass
class QueryStateEvent(InboundEvent):
    pass


@dataclass
class ClearAllEvent(InboundEvent):
    """Event to discard the session, the preference and the audio cache."""

    pass


@dataclass
class PageLoadedEvent(InboundEvent):
    """Event raised when a browser page finishes loading a URL."""

    page_id: str
    url: str


@dataclass
class PresentationClosedEvent(InboundEvent):
    """Event raised when the player surface goes away."""

    pass
