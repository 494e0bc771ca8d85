"""
Pytest configuration and fixtures for voxbridge tests.

Provides a store in a temporary directory and an orchestrator wired to
mocked speech, translation and TTS providers.
"""

import sys
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock

import pytest

# Add src directory to Python path to allow importing voxbridge
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from voxbridge.orchestrator import ConversationOrchestrator  # noqa: E402
from voxbridge.speech.transcription import TranscriptionAdapter  # noqa: E402
from voxbridge.speech.translation import TranslationAdapter  # noqa: E402
from voxbridge.storage import ConversationStore  # noqa: E402
from voxbridge.voice.engines.base import AudioFormat, TTSResult  # noqa: E402
from voxbridge.voice.pipeline import VoiceSynthesisPipeline  # noqa: E402

FRENCH = {
    "Hello": "Bonjour",
    "How are you?": "Comment allez-vous ?",
}


def make_tts_engine(
    name: str,
    audio: bytes = b"ID3mock-mp3",
    error: Optional[Exception] = None,
) -> AsyncMock:
    """Create a mock TTS engine.

    Args:
        name: Provenance tag the engine reports.
        audio: Payload returned on success (may be empty).
        error: If given, synthesize() raises it.
    """
    engine = AsyncMock()
    engine.name = name
    engine.is_available = lambda: True
    if error is not None:
        engine.synthesize.side_effect = error
    else:
        engine.synthesize.return_value = TTSResult(
            audio_data=audio,
            format=AudioFormat.MP3,
            engine_name=name,
        )
    return engine


class FakeSpeechToText:
    """Returns queued (text, language) results in order."""

    def __init__(self, *results: tuple[Optional[str], Optional[str]]) -> None:
        self.results = list(results)
        self.calls: list[tuple[bytes, str]] = []

    async def transcribe(self, audio, filename):
        self.calls.append((audio.read(), filename))
        return self.results.pop(0)


class FakeTranslator:
    """Translator that knows a few English <-> French phrases."""

    def __init__(self, detected: Optional[str] = "fr") -> None:
        self.detected = detected
        self.calls: list[tuple[str, str]] = []

    async def translate(self, text, to):
        self.calls.append((text, to))
        if to == "en":
            reverse = {fr: en for en, fr in FRENCH.items()}
            return self.detected, [reverse.get(text, text)]
        if to == "fr":
            return "en", [FRENCH.get(text, f"[fr] {text}")]
        return "en", [f"[{to}] {text}"]


@pytest.fixture
def tts_engine():
    """Factory fixture: ``tts_engine("rest", error=...)``."""
    return make_tts_engine


@pytest.fixture
def store(tmp_path: Path) -> ConversationStore:
    return ConversationStore(tmp_path / "data")


@pytest.fixture
def stt() -> FakeSpeechToText:
    return FakeSpeechToText()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def rest_engine() -> AsyncMock:
    return make_tts_engine("rest")


@pytest.fixture
def sdk_engine() -> AsyncMock:
    return make_tts_engine("sdk")


@pytest.fixture
def orchestrator(
    store: ConversationStore,
    stt: FakeSpeechToText,
    translator: FakeTranslator,
    rest_engine: AsyncMock,
    sdk_engine: AsyncMock,
) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        store=store,
        transcriber=TranscriptionAdapter(stt),
        translator=TranslationAdapter(translator),
        voice=VoiceSynthesisPipeline([rest_engine, sdk_engine]),
    )
