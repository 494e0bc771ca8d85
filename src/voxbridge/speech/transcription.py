"""
Speech-to-text adapter.

Wraps a transcription provider and normalizes its output to a
``Transcript(text, language)``. The default provider is an Azure OpenAI
Whisper deployment reached through the ``openai`` SDK.
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol, Union

from openai import AsyncAzureOpenAI

from ..errors import TranscriptionFailure
from ..models import AUTO

logger = logging.getLogger("voxbridge.speech.transcription")

UPLOAD_FILENAME = "speech.webm"

# Whisper's verbose output names languages in English ("french").
_WHISPER_LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "french": "fr",
    "spanish": "es",
    "german": "de",
    "italian": "it",
    "portuguese": "pt",
    "polish": "pl",
    "russian": "ru",
    "turkish": "tr",
    "arabic": "ar",
    "chinese": "zh-Hans",
    "japanese": "ja",
    "korean": "ko",
    "dutch": "nl",
    "swedish": "sv",
}


@dataclass(frozen=True)
class Transcript:
    """Normalized transcription result.

    Attributes:
        text: Recognized text; empty when no speech was detected.
        language: Detected language code, or ``"auto"`` if unknown.
    """

    text: str = ""
    language: str = AUTO

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class SpeechToText(Protocol):
    """Minimal provider interface the TranscriptionAdapter needs."""

    async def transcribe(
        self, audio: BinaryIO, filename: str
    ) -> tuple[Optional[str], Optional[str]]:  # pragma: no cover - interface only
        """Return (text, language) for a seekable audio stream."""
        ...


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Map a Whisper language name to a language code; codes pass through."""
    if not language:
        return None
    return _WHISPER_LANGUAGE_CODES.get(language.strip().lower(), language.strip())


class WhisperTranscriber:
    """Azure OpenAI Whisper provider.

    The SDK client is created on first use so an unconfigured relay can
    still start; calls then fail with a descriptive error.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment: str = "whisper",
        api_version: str = "2024-06-01",
        timeout: float = 30.0,
        client: Optional[AsyncAzureOpenAI] = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._deployment = deployment
        self._api_version = api_version
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> AsyncAzureOpenAI:
        if self._client is None:
            if not (self._endpoint and self._api_key):
                raise RuntimeError("Azure OpenAI endpoint/key not configured")
            self._client = AsyncAzureOpenAI(
                azure_endpoint=self._endpoint,
                api_key=self._api_key,
                api_version=self._api_version,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    async def transcribe(
        self, audio: BinaryIO, filename: str
    ) -> tuple[Optional[str], Optional[str]]:
        client = self._get_client()
        result = await client.audio.transcriptions.create(
            model=self._deployment,
            file=(filename, audio),
            response_format="verbose_json",
        )
        return result.text, normalize_language(getattr(result, "language", None))


class TranscriptionAdapter:
    """Turns raw audio into a normalized Transcript.

    Args:
        provider: Speech-to-text provider.
        filename: Name sent upstream with the audio; its extension tells
                  the provider which container to expect.
    """

    def __init__(self, provider: SpeechToText, filename: str = UPLOAD_FILENAME) -> None:
        self._provider = provider
        self._filename = filename

    async def transcribe(self, audio: Union[bytes, BinaryIO]) -> Transcript:
        """Transcribe an audio payload.

        The payload is buffered fully into memory first because providers
        require a seekable source.

        Raises:
            TranscriptionFailure: If the provider call errors for any reason.
        """
        buffer = io.BytesIO(audio if isinstance(audio, (bytes, bytearray)) else audio.read())
        buffer.seek(0)

        try:
            text, language = await self._provider.transcribe(buffer, self._filename)
        except Exception as exc:
            logger.error("Transcription provider failed: %s", exc)
            raise TranscriptionFailure(f"Transcription failed: {exc}") from exc

        transcript = Transcript(text=(text or "").strip(), language=language or AUTO)
        logger.info(
            "Transcribed %d bytes -> %d chars (language=%s)",
            buffer.getbuffer().nbytes,
            len(transcript.text),
            transcript.language,
        )
        return transcript
