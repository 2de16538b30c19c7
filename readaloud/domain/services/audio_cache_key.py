"""Cache keys for synthesized chunk audio."""

from typing import Optional

AUDIO_CACHE_PREFIX = "tts_audio_cache_"
CHUNK_SEPARATOR = "||TTS_CHUNK||"
UNDEFINED_TEXT_KEY = AUDIO_CACHE_PREFIX + "undefined_text"
EMPTY_TEXT_KEY = AUDIO_CACHE_PREFIX + "empty_text"

KEY_PART_LENGTH = 200
SHORT_TEXT_LIMIT = 400


def audio_cache_key(text: Optional[str]) -> str:
    """Derive the audio cache key for a chunk of text.

    Texts of up to 400 characters are keyed by their first 200 characters.
    Longer texts are keyed by their first and last 200 characters, so two
    long texts that differ only in the middle share a key.
    """
    if text is None:
        return UNDEFINED_TEXT_KEY

    trimmed = text.strip()
    if not trimmed:
        return EMPTY_TEXT_KEY

    prefix = trimmed[:KEY_PART_LENGTH]
    if len(trimmed) <= SHORT_TEXT_LIMIT:
        return AUDIO_CACHE_PREFIX + prefix

    suffix = trimmed[-KEY_PART_LENGTH:]
    return AUDIO_CACHE_PREFIX + prefix + CHUNK_SEPARATOR + suffix
