"""
Edge-TTS engine wrapper.

Edge-TTS streams Microsoft's neural voices over the edge read-aloud
websocket channel, so it accepts the same voice names as the REST tier
while failing independently of it. It serves as the secondary tier.

Requires the `edge-tts` package: pip install edge-tts
"""

import logging
import time
from typing import Optional

from .base import AudioFormat, TTSEngine, TTSResult, VoiceConfig

logger = logging.getLogger("voxbridge.voice.edge_tts")


def _check_edge_tts_available() -> bool:
    """Check if the edge-tts package is importable."""
    try:
        import edge_tts  # noqa: F401

        return True
    except ImportError:
        return False


class EdgeTTSEngine(TTSEngine):
    """Edge-TTS engine for streamed cloud speech synthesis.

    Args:
        timeout: Seconds allowed both for opening the websocket and for
                 each wait on the audio stream.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._available: bool | None = None
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "sdk"

    def is_available(self) -> bool:
        if self._available is None:
            self._available = _check_edge_tts_available()
            if not self._available:
                logger.debug("edge-tts package not installed")
        return self._available

    async def synthesize(
        self,
        text: str,
        voice_config: Optional[VoiceConfig] = None,
    ) -> TTSResult:
        """Synthesize text using Edge-TTS.

        Returns:
            TTSResult with MP3 audio data (Edge-TTS native format).

        Raises:
            RuntimeError: If edge-tts is not available or synthesis fails.
        """
        if not self.is_available():
            raise RuntimeError(
                "Edge-TTS engine is not available (edge-tts not installed)"
            )

        config = voice_config or VoiceConfig()

        try:
            import edge_tts

            start_time = time.monotonic()
            communicate = edge_tts.Communicate(
                text,
                voice=config.voice_id,
                connect_timeout=self._timeout,
                receive_timeout=self._timeout,
            )

            audio_chunks: list[bytes] = []
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio_chunks.append(chunk["data"])

            audio_data = b"".join(audio_chunks)
            elapsed_ms = (time.monotonic() - start_time) * 1000

            logger.info("Edge-TTS synthesis: %.0fms latency, %d bytes", elapsed_ms, len(audio_data))

            return TTSResult(
                audio_data=audio_data,
                format=AudioFormat.MP3,
                engine_name=self.name,
            )

        except ImportError:
            self._available = False
            raise RuntimeError("edge-tts package not found during synthesis")
        except Exception as exc:
            raise RuntimeError(f"Edge-TTS synthesis failed: {exc}") from exc
