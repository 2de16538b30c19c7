"""Speech synthesizer interface."""

from typing import Protocol, runtime_checkable

from ..entities.audio import AudioArtifact


@runtime_checkable
class SpeechSynthesizer(Protocol):

    async def synthesize(self, text: str) -> AudioArtifact:
        """Synthesize speech for one chunk of text.

        Raises:
            SynthesisFailed: On a network error, a non-success response,
                or an empty audio payload.
        """
        ...
