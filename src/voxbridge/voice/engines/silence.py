"""
Silence engine: the tier that cannot fail.

Produces a short linear-PCM WAV of silence so a client audio player
always receives something it can play.
"""

import io
import struct
from typing import Optional

from .base import AudioFormat, TTSEngine, TTSResult, VoiceConfig

SAMPLE_RATE = 16000
CHANNELS = 1
BITS_PER_SAMPLE = 16


def wav_silence(seconds: int = 1, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Build a mono 16-bit PCM WAV file containing only silence.

    Args:
        seconds: Duration in whole seconds.
        sample_rate: Sample rate in Hz.

    Returns:
        WAV file bytes (44-byte header followed by zeroed samples).
    """
    block_align = CHANNELS * (BITS_PER_SAMPLE // 8)
    data_size = sample_rate * seconds * block_align

    buf = io.BytesIO()
    buf.write(b"RIFF")
    buf.write(struct.pack("<I", 36 + data_size))
    buf.write(b"WAVE")
    buf.write(b"fmt ")
    buf.write(struct.pack("<I", 16))  # chunk size
    buf.write(struct.pack("<H", 1))  # PCM
    buf.write(struct.pack("<H", CHANNELS))
    buf.write(struct.pack("<I", sample_rate))
    buf.write(struct.pack("<I", sample_rate * block_align))  # byte rate
    buf.write(struct.pack("<H", block_align))
    buf.write(struct.pack("<H", BITS_PER_SAMPLE))
    buf.write(b"data")
    buf.write(struct.pack("<I", data_size))
    buf.write(bytes(data_size))

    return buf.getvalue()


class SilenceEngine(TTSEngine):
    """Returns one second of silence regardless of the text."""

    def __init__(self, seconds: int = 1) -> None:
        self._seconds = seconds

    @property
    def name(self) -> str:
        return "fallback"

    def is_available(self) -> bool:
        return True

    async def synthesize(
        self,
        text: str,
        voice_config: Optional[VoiceConfig] = None,
    ) -> TTSResult:
        return TTSResult(
            audio_data=wav_silence(self._seconds),
            format=AudioFormat.WAV,
            engine_name=self.name,
        )
