"""Splitting article text into chunks small enough for one synthesis request."""

import re

DEFAULT_MAX_CHUNK_CHARS = 1500
PREFERRED_SPLIT_CHARS = (".", "?", "!", ";")

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def split_text_into_chunks(
    text: str,
    max_chunk_length: int = DEFAULT_MAX_CHUNK_CHARS,
    preferred_split_chars: tuple[str, ...] = PREFERRED_SPLIT_CHARS,
) -> list[str]:
    """Split text into chunks of at most ``max_chunk_length`` characters.

    Splits after sentence punctuation in the second half of the window when
    possible, then at the last space, and otherwise hard at the limit.
    """
    if max_chunk_length <= 0:
        raise ValueError("max_chunk_length must be positive")

    chunks: list[str] = []
    remaining = (text or "").strip()

    while remaining:
        if len(remaining) <= max_chunk_length:
            chunks.append(remaining)
            break

        split_at = -1
        for i in range(max_chunk_length - 1, max_chunk_length // 2, -1):
            if remaining[i] in preferred_split_chars:
                split_at = i + 1
                break

        if split_at == -1:
            split_at = remaining.rfind(" ", 0, max_chunk_length + 1)

        if split_at <= 0:
            split_at = max_chunk_length

        chunks.append(remaining[:split_at].strip())
        remaining = remaining[split_at:].strip()

    return [chunk for chunk in chunks if chunk]


def chunk_article_text(text: str, max_chunk_length: int = DEFAULT_MAX_CHUNK_CHARS) -> list[str]:
    """Split article text by paragraph, then split oversized paragraphs."""
    chunks: list[str] = []
    for paragraph in _PARAGRAPH_BREAK.split(text or ""):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if len(paragraph) > max_chunk_length:
            chunks.extend(split_text_into_chunks(paragraph, max_chunk_length))
        else:
            chunks.append(paragraph)

    if not chunks and (text or "").strip():
        chunks.append(text.strip())
    return chunks
