"""Audio-related entities."""

import base64
import binascii

from pydantic import BaseModel


class AudioArtifact(BaseModel):
    """Synthesized audio for one text chunk."""

    content: bytes
    media_type: str = "audio/mpeg"

    @property
    def size(self) -> int:
        return len(self.content)

    def to_data_url(self) -> str:
        """Encode the artifact as a ``data:`` URL for storage and the wire."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, data_url: str) -> "AudioArtifact":
        """Decode an artifact previously produced by :meth:`to_data_url`.

        Raises:
            ValueError: If the value is not a base64 ``data:`` URL.
        """
        if not isinstance(data_url, str) or not data_url.startswith("data:"):
            raise ValueError("Audio artifact must be a data URL")

        header, _, payload = data_url[len("data:"):].partition(",")
        media_type, _, encoding = header.partition(";")
        if encoding != "base64" or not payload:
            raise ValueError("Audio artifact data URL must be base64 encoded")

        try:
            content = base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 audio payload: {e}") from e

        return cls(content=content, media_type=media_type or "audio/mpeg")
