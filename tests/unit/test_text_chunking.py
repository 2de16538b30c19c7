"""Tests for splitting article text into chunks."""

import pytest

from readaloud.domain.services.text_chunking import chunk_article_text, split_text_into_chunks


class TestSplitTextIntoChunks:

    def test_short_text_is_one_chunk(self):
        assert split_text_into_chunks("  Just one sentence.  ") == ["Just one sentence."]

    def test_empty_text_has_no_chunks(self):
        assert split_text_into_chunks("") == []
        assert split_text_into_chunks(None) == []

    def test_prefers_sentence_boundaries(self):
        text = "First sentence here. Second sentence is a bit longer! Third?"
        chunks = split_text_into_chunks(text, max_chunk_length=30)

        assert chunks[0] == "First sentence here."
        assert all(len(chunk) <= 30 for chunk in chunks)
        assert " ".join(chunks) == text

    def test_falls_back_to_spaces(self):
        text = "word " * 30
        chunks = split_text_into_chunks(text, max_chunk_length=22)

        assert all(len(chunk) <= 22 for chunk in chunks)
        assert all(not chunk.startswith(" ") for chunk in chunks)
        assert " ".join(chunks).split() == text.split()

    def test_hard_split_without_spaces(self):
        chunks = split_text_into_chunks("x" * 25, max_chunk_length=10)
        assert chunks == ["x" * 10, "x" * 10, "x" * 5]

    def test_never_exceeds_limit_at_punctuation(self):
        text = "a" * 9 + "." + "b" * 20
        chunks = split_text_into_chunks(text, max_chunk_length=10)
        assert all(len(chunk) <= 10 for chunk in chunks)

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            split_text_into_chunks("text", max_chunk_length=0)


class TestChunkArticleText:

    def test_splits_paragraphs(self):
        text = "First paragraph.\n\nSecond paragraph.\n   \nThird."
        assert chunk_article_text(text) == ["First paragraph.", "Second paragraph.", "Third."]

    def test_splits_oversized_paragraphs(self):
        text = "Short one.\n\n" + "Long sentence number one. " * 10
        chunks = chunk_article_text(text, max_chunk_length=60)

        assert chunks[0] == "Short one."
        assert len(chunks) > 2
        assert all(len(chunk) <= 60 for chunk in chunks)

    def test_blank_text(self):
        assert chunk_article_text("\n\n  \n") == []
