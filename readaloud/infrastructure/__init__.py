"""Infrastructure layer components."""

from .browser_bridge import BrowserBridge
from .dynamodb_key_value_store import DynamoDBKeyValueStore
from .http_speech_service import HttpSpeechService
from .local_key_value_store import LocalKeyValueStore
from .presentation_channel import PresentationChannel

__all__ = [
    "BrowserBridge",
    "DynamoDBKeyValueStore",
    "HttpSpeechService",
    "LocalKeyValueStore",
    "PresentationChannel",
]
