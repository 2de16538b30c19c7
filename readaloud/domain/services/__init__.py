"""Domain services for the read-aloud engine."""

from .audio_cache_key import audio_cache_key
from .continuation_coordinator import ContinuationCoordinator
from .event_dispatcher import SessionEventDispatcher
from .history_service import HistoryService
from .persistence_gateway import PersistenceGateway
from .prefetch_cache import PrefetchCache
from .session_state_machine import SessionStateMachine
from .text_chunking import chunk_article_text, split_text_into_chunks

__all__ = [
    "ContinuationCoordinator",
    "HistoryService",
    "PersistenceGateway",
    "PrefetchCache",
    "SessionEventDispatcher",
    "SessionStateMachine",
    "audio_cache_key",
    "chunk_article_text",
    "split_text_into_chunks",
]
