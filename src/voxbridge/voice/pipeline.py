"""
Tiered speech synthesis with graceful degradation.

The pipeline walks an ordered list of TTS engines and returns the first
non-empty result:

  1. rest     - Azure Speech REST endpoint (MP3)
  2. sdk      - Edge-TTS streaming channel, same voice (MP3)
  3. fallback - one second of WAV silence

A failed tier is logged and its error message is carried forward as a
warning, so the caller can show why audio is degraded. ``speak`` never
raises: total provider failure still yields playable audio.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..config import RelaySettings
from .engines.azure_rest import AzureRestEngine
from .engines.base import AudioFormat, TTSEngine, TTSResult, VoiceConfig
from .engines.edge_tts import EdgeTTSEngine
from .engines.silence import SilenceEngine, wav_silence
from .ssml import sanitize
from .voices import resolve_voice

logger = logging.getLogger("voxbridge.voice.pipeline")


@dataclass(frozen=True)
class SpeechResult:
    """Playable audio plus how it was obtained.

    Attributes:
        audio: Encoded audio bytes (never empty).
        content_type: MIME type of ``audio``.
        source: Provenance tag of the tier that produced it.
        warning: Error text from a failed tier, if any tier failed.
    """

    audio: bytes
    content_type: str
    source: str
    warning: Optional[str] = None

    def data_url(self) -> str:
        """Return the audio as a base64 ``data:`` URL."""
        return f"data:{self.content_type};base64,{base64.b64encode(self.audio).decode('ascii')}"


class VoiceSynthesisPipeline:
    """Ordered TTS tiers with uniform success/failure signalling.

    Usage:
        pipeline = VoiceSynthesisPipeline([AzureRestEngine(key, region), EdgeTTSEngine()])
        result = await pipeline.speak("Bonjour", "fr")
    """

    def __init__(
        self,
        engines: Sequence[TTSEngine],
        default_voice: Optional[VoiceConfig] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            engines: Tiers in priority order. A SilenceEngine is appended
                     when the list does not already end with one.
            default_voice: Voice for hints missing from the voice table.
        """
        tiers = list(engines)
        if not tiers or not isinstance(tiers[-1], SilenceEngine):
            tiers.append(SilenceEngine())
        self._engines = tiers
        self._default_voice = default_voice

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "VoiceSynthesisPipeline":
        """Build the tier list named by ``settings.tts_tiers``."""
        factories = {
            "rest": lambda: AzureRestEngine(
                settings.speech_key,
                settings.speech_region,
                timeout=settings.provider_timeout,
            ),
            "sdk": lambda: EdgeTTSEngine(timeout=settings.provider_timeout),
            "fallback": SilenceEngine,
        }
        engines = [factories[tier]() for tier in settings.tts_tiers]

        voice = settings.speech_voice
        default_voice = VoiceConfig(locale="-".join(voice.split("-")[:2]), voice_id=voice)
        return cls(engines, default_voice=default_voice)

    @property
    def tiers(self) -> list[str]:
        """Provenance tags of the configured tiers, in order."""
        return [engine.name for engine in self._engines]

    async def speak(self, text: Optional[str], language_hint: Optional[str] = None) -> SpeechResult:
        """Synthesize text in the voice matching a language hint.

        Args:
            text: Text to speak; sanitized before use.
            language_hint: Language code such as "fr" or "zh-Hans".

        Returns:
            SpeechResult from the first tier that produced audio.
        """
        utterance = sanitize(text)
        voice = resolve_voice(language_hint, self._default_voice)
        errors: list[str] = []

        for engine in self._engines:
            try:
                result = await engine.synthesize(utterance, voice)
                if not isinstance(result, TTSResult) or not result.audio_data:
                    errors.append(f"{engine.name} returned no audio")
                    logger.warning("TTS tier '%s' returned an empty payload, degrading", engine.name)
                    continue
            except Exception as exc:
                errors.append(str(exc) or type(exc).__name__)
                logger.warning("TTS tier '%s' failed, degrading: %s", engine.name, exc)
                continue

            logger.info(
                "Synthesis succeeded with tier '%s' (voice=%s, %d bytes)",
                engine.name,
                voice.voice_id,
                len(result.audio_data),
            )
            return SpeechResult(
                audio=result.audio_data,
                content_type=result.format.content_type,
                source=engine.name,
                warning=errors[-1] if errors else None,
            )

        # Unreachable while SilenceEngine terminates the list.
        return SpeechResult(
            audio=wav_silence(),
            content_type=AudioFormat.WAV.content_type,
            source="fallback",
            warning=errors[-1] if errors else None,
        )

    async def shutdown(self) -> None:
        """Shut down all engines and release resources."""
        for engine in self._engines:
            try:
                await engine.shutdown()
            except Exception as exc:
                logger.warning("Error shutting down TTS tier '%s': %s", engine.name, exc)
