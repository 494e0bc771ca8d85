"""TTS engine implementations for the synthesis tiers."""

from .azure_rest import AzureRestEngine
from .base import AudioFormat, TTSEngine, TTSResult, VoiceConfig
from .edge_tts import EdgeTTSEngine
from .silence import SilenceEngine, wav_silence

__all__ = [
    "AzureRestEngine",
    "EdgeTTSEngine",
    "SilenceEngine",
    "wav_silence",
    "AudioFormat",
    "TTSEngine",
    "TTSResult",
    "VoiceConfig",
]
