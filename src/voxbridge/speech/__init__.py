"""Speech recognition and translation adapters."""

from .transcription import (
    SpeechToText,
    Transcript,
    TranscriptionAdapter,
    WhisperTranscriber,
)
from .translation import AzureTranslator, TextTranslator, TranslationAdapter

__all__ = [
    "SpeechToText",
    "Transcript",
    "TranscriptionAdapter",
    "WhisperTranscriber",
    "TextTranslator",
    "TranslationAdapter",
    "AzureTranslator",
]
