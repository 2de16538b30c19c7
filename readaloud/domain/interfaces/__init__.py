"""Domain interfaces for the read-aloud service."""

from .content_extractor import ContentExtractor
from .key_value_store import KeyValueStore
from .next_page_resolver import NextPageResolver
from .page_navigator import PageNavigator
from .presentation_sink import PresentationSink
from .speech_synthesizer import SpeechSynthesizer

__all__ = [
    "ContentExtractor",
    "KeyValueStore",
    "NextPageResolver",
    "PageNavigator",
    "PresentationSink",
    "SpeechSynthesizer",
]
