"""
Azure Speech REST engine.

Posts an SSML document to the regional ``cognitiveservices/v1`` endpoint
and receives MP3 audio in the response body. This is the primary tier.
"""

import logging
import time
from typing import Optional

import httpx

from ..ssml import build_ssml
from .base import AudioFormat, TTSEngine, TTSResult, VoiceConfig

logger = logging.getLogger("voxbridge.voice.azure_rest")

OUTPUT_FORMAT = "audio-24khz-48kbitrate-mono-mp3"
USER_AGENT = "voxbridge/1.0"


class AzureRestEngine(TTSEngine):
    """Azure neural TTS over plain HTTPS.

    Args:
        key: Speech resource subscription key.
        region: Speech resource region (e.g. "westeurope").
        timeout: Request timeout in seconds.
        client: Optional shared httpx client; a short-lived client is
                created per request when omitted.
    """

    def __init__(
        self,
        key: str,
        region: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._key = key
        self._region = region
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "rest"

    @property
    def url(self) -> str:
        return f"https://{self._region}.tts.speech.microsoft.com/cognitiveservices/v1"

    def is_available(self) -> bool:
        return bool(self._key and self._region)

    async def synthesize(
        self,
        text: str,
        voice_config: Optional[VoiceConfig] = None,
    ) -> TTSResult:
        if not self.is_available():
            raise RuntimeError("Azure REST engine is not available (speech key/region not set)")

        config = voice_config or VoiceConfig()
        ssml = build_ssml(text, config.locale, config.voice_id)
        headers = {
            "User-Agent": USER_AGENT,
            "Ocp-Apim-Subscription-Key": self._key,
            "Ocp-Apim-Subscription-Region": self._region,
            "X-Microsoft-OutputFormat": OUTPUT_FORMAT,
            "Content-Type": "application/ssml+xml; charset=utf-8",
        }

        start_time = time.monotonic()
        try:
            if self._client is not None:
                response = await self._client.post(
                    self.url, content=ssml.encode("utf-8"), headers=headers,
                    timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        self.url, content=ssml.encode("utf-8"), headers=headers,
                    )
        except httpx.TimeoutException:
            raise RuntimeError("TTS request timed out") from None
        except httpx.RequestError as e:
            raise RuntimeError(f"TTS request failed: {e}") from e

        if response.is_error:
            raise RuntimeError(
                f"TTS HTTP {response.status_code} {response.reason_phrase}: {response.text}"
            )

        audio_data = response.content
        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info("Azure REST synthesis: %.0fms latency, %d bytes", elapsed_ms, len(audio_data))

        return TTSResult(
            audio_data=audio_data,
            format=AudioFormat.MP3,
            engine_name=self.name,
        )
