"""Tests for HistoryService."""

import pytest

from readaloud.domain.services.history_service import HISTORY_KEY, HistoryService

from tests.conftest import audio_for


@pytest.mark.asyncio
async def test_newest_first(history):
    await history.add("first", audio_for("first"), title="One")
    await history.add("second", audio_for("second"))

    items = await history.list_items()

    assert [item.text for item in items] == ["second", "first"]
    assert items[0].title == "Audio Snippet"
    assert items[1].title == "One"
    assert items[1].audio_data_url == audio_for("first").to_data_url()


@pytest.mark.asyncio
async def test_same_text_is_deduplicated(history):
    await history.add("repeat", audio_for("repeat"))
    await history.add("other", audio_for("other"))
    await history.add("repeat", audio_for("repeat"))

    items = await history.list_items()

    assert [item.text for item in items] == ["repeat", "other"]


@pytest.mark.asyncio
async def test_capped_at_max_items(store):
    history = HistoryService(store, max_items=10)
    for i in range(12):
        await history.add(f"text {i}", audio_for(f"text {i}"))

    items = await history.list_items()

    assert len(items) == 10
    assert items[0].text == "text 11"
    assert items[-1].text == "text 2"


@pytest.mark.asyncio
async def test_remove_and_clear(history):
    await history.add("keep", audio_for("keep"))
    await history.add("drop", audio_for("drop"))

    await history.remove("drop")
    assert [item.text for item in await history.list_items()] == ["keep"]

    assert await history.clear() is True
    assert await history.list_items() == []


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(history, store):
    await history.add("good", audio_for("good"))
    raw = await store.get(HISTORY_KEY)
    await store.set(HISTORY_KEY, raw + [{"title": "missing text"}])

    items = await history.list_items()

    assert [item.text for item in items] == ["good"]
