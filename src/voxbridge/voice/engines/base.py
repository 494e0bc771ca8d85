"""
Abstract base class for TTS engines.

Every synthesis tier (Azure REST, Edge-TTS, silence) implements this
interface, allowing the VoiceSynthesisPipeline to treat them uniformly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_LOCALE = "en-GB"
DEFAULT_VOICE = "en-GB-SoniaNeural"


class AudioFormat(Enum):
    """Supported audio output formats."""

    WAV = "wav"
    MP3 = "mp3"

    @property
    def content_type(self) -> str:
        """MIME type for audio in this format."""
        return _CONTENT_TYPES[self]


_CONTENT_TYPES: dict[AudioFormat, str] = {
    AudioFormat.WAV: "audio/wav",
    AudioFormat.MP3: "audio/mpeg",
}


@dataclass(frozen=True)
class VoiceConfig:
    """Voice selected for a synthesis request.

    Attributes:
        locale: BCP-47 locale of the voice (e.g. "fr-FR").
        voice_id: Neural voice name (e.g. "fr-FR-DeniseNeural").
    """

    locale: str = DEFAULT_LOCALE
    voice_id: str = DEFAULT_VOICE


@dataclass
class TTSResult:
    """Result of a TTS synthesis operation.

    Attributes:
        audio_data: Raw audio bytes.
        format: Audio format of the data.
        engine_name: Name of the engine that produced this result.
    """

    audio_data: bytes
    format: AudioFormat
    engine_name: str


class TTSEngine(ABC):
    """Abstract base class for Text-to-Speech engines.

    Subclasses must implement:
    - name: The provenance tag reported to clients ("rest", "sdk", ...).
    - is_available(): Whether the engine is configured and usable.
    - synthesize(): Convert text to audio bytes.

    A failed synthesis is signalled by raising; an engine that returns
    an empty payload is treated as failed by the pipeline as well.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provenance tag for audio produced by this engine."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this engine is configured and its dependencies are installed."""
        ...

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice_config: Optional[VoiceConfig] = None,
    ) -> TTSResult:
        """Synthesize text into audio.

        Args:
            text: Sanitized text to convert to speech.
            voice_config: Voice to use. If None, use the default voice.

        Returns:
            TTSResult containing the audio data and metadata.

        Raises:
            RuntimeError: If synthesis fails.
        """
        ...

    async def shutdown(self) -> None:
        """Release held resources. Default implementation is a no-op."""
