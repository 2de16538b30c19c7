"""Test that infrastructure implementations conform to the domain protocols."""

import httpx

from readaloud.domain.interfaces import (
    ContentExtractor,
    KeyValueStore,
    NextPageResolver,
    PageNavigator,
    PresentationSink,
    SpeechSynthesizer,
)
from readaloud.infrastructure import (
    BrowserBridge,
    DynamoDBKeyValueStore,
    HttpSpeechService,
    LocalKeyValueStore,
    PresentationChannel,
)


def test_key_value_stores_implement_protocol():
    """Test that both stores implement the KeyValueStore protocol."""
    for store in (LocalKeyValueStore(), DynamoDBKeyValueStore("test-table")):
        assert isinstance(store, KeyValueStore)
        for method in ("get", "set", "remove", "keys_with_prefix"):
            assert callable(getattr(store, method))


def test_browser_bridge_implements_protocols():
    bridge = BrowserBridge(PresentationChannel())

    assert isinstance(bridge, ContentExtractor)
    assert isinstance(bridge, PageNavigator)


def test_speech_service_implements_protocols():
    service = HttpSpeechService(
        "http://tts.test/synthesize",
        "http://tts.test/next-page",
        client=httpx.AsyncClient(),
    )

    assert isinstance(service, SpeechSynthesizer)
    assert isinstance(service, NextPageResolver)


def test_presentation_channel_implements_protocol():
    assert isinstance(PresentationChannel(), PresentationSink)
