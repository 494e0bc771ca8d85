"""
Voice subsystem for voxbridge.

Provides Text-to-Speech with a 3-tier pipeline:
- Tier 1 (rest): Azure Speech REST endpoint
- Tier 2 (sdk): Edge-TTS streaming channel with the same neural voice
- Tier 3 (fallback): one second of WAV silence

The pipeline sanitizes text for SSML, picks a voice from the language
hint, and cascades through tiers until one produces audio.
"""

from .engines.base import AudioFormat, TTSEngine, TTSResult, VoiceConfig
from .pipeline import SpeechResult, VoiceSynthesisPipeline
from .ssml import build_ssml, sanitize
from .voices import resolve_voice

__all__ = [
    # Pipeline
    "VoiceSynthesisPipeline",
    "SpeechResult",
    # Engine interface
    "TTSEngine",
    "VoiceConfig",
    "TTSResult",
    "AudioFormat",
    # Text and voice helpers
    "sanitize",
    "build_ssml",
    "resolve_voice",
]
