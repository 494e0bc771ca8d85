"""
Translation adapter.

Wraps a text-translation provider. The default provider is the Azure
Translator Text REST API (v3.0) called over httpx.
"""

import logging
from typing import Optional, Protocol

import httpx

from ..errors import TranslationFailure
from ..models import AUTO

logger = logging.getLogger("voxbridge.speech.translation")

API_VERSION = "3.0"


class TextTranslator(Protocol):
    """Minimal provider interface the TranslationAdapter needs."""

    async def translate(
        self, text: str, to: str
    ) -> tuple[Optional[str], list[str]]:  # pragma: no cover - interface only
        """Return (detected_language, translation_candidates)."""
        ...


class AzureTranslator:
    """Azure Translator REST provider.

    Args:
        key: Translator subscription key.
        region: Translator resource region.
        endpoint: Service base URL.
        timeout: Request timeout in seconds.
        client: Optional shared httpx client.
    """

    def __init__(
        self,
        key: str,
        region: str,
        endpoint: str = "https://api.cognitive.microsofttranslator.com",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._key = key
        self._region = region
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def translate(self, text: str, to: str) -> tuple[Optional[str], list[str]]:
        if not self._key:
            raise RuntimeError("Translator key not configured")

        url = f"{self._endpoint}/translate"
        params = {"api-version": API_VERSION, "to": to}
        headers = {"Ocp-Apim-Subscription-Key": self._key}
        if self._region:
            headers["Ocp-Apim-Subscription-Region"] = self._region
        body = [{"Text": text}]

        try:
            if self._client is not None:
                response = await self._client.post(
                    url, params=params, headers=headers, json=body, timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, params=params, headers=headers, json=body)
            response.raise_for_status()
        except httpx.TimeoutException:
            raise RuntimeError("Translator is not responding (timeout)") from None
        except httpx.HTTPStatusError as e:
            raise RuntimeError(
                f"Translator returned HTTP {e.response.status_code}: {e.response.text}"
            ) from None

        data = response.json()
        if not isinstance(data, list) or not data:
            raise RuntimeError("Invalid response from Translator: expected a non-empty array")

        first = data[0]
        detected = (first.get("detectedLanguage") or {}).get("language")
        candidates = [t["text"] for t in first.get("translations", []) if t.get("text") is not None]
        return detected, candidates


class TranslationAdapter:
    """Normalizes detect+translate and plain translate calls."""

    def __init__(self, provider: TextTranslator) -> None:
        self._provider = provider

    async def _call(self, text: str, target: str) -> tuple[Optional[str], list[str]]:
        try:
            return await self._provider.translate(text, target)
        except Exception as exc:
            logger.error("Translation provider failed (to=%s): %s", target, exc)
            raise TranslationFailure(f"Translation failed: {exc}") from exc

    async def detect_and_translate(self, text: str, target: str = "en") -> tuple[str, str]:
        """Detect the language of ``text`` and translate it.

        Returns:
            (detected_language, translated_text). The detection falls back to
            ``"auto"`` and the translation to the original text when the
            provider does not supply them.

        Raises:
            TranslationFailure: If the provider call errors.
        """
        if not text.strip():
            return AUTO, text

        detected, candidates = await self._call(text, target)
        translated = candidates[0] if candidates else text
        detected = detected or AUTO
        logger.info("Detected %s, translated %d chars to %s", detected, len(text), target)
        return detected, translated

    async def translate(self, text: str, target: str) -> str:
        """Translate ``text`` into ``target``; the source is auto-detected.

        Raises:
            TranslationFailure: If the provider errors or yields no candidate.
        """
        _, candidates = await self._call(text, target)
        if not candidates:
            raise TranslationFailure(f"Translation failed: no candidate returned for '{target}'")
        logger.info("Translated %d chars to %s", len(text), target)
        return candidates[0]
