"""
Language hint -> neural voice lookup.
"""

from typing import Optional

from .engines.base import DEFAULT_LOCALE, DEFAULT_VOICE, VoiceConfig

# Keys are lower-case language hints; regional aliases share a voice.
_VOICE_TABLE: dict[str, tuple[str, str]] = {
    "en": ("en-GB", "en-GB-SoniaNeural"),
    "en-gb": ("en-GB", "en-GB-SoniaNeural"),
    "en-us": ("en-US", "en-US-JennyNeural"),
    "fr": ("fr-FR", "fr-FR-DeniseNeural"),
    "fr-fr": ("fr-FR", "fr-FR-DeniseNeural"),
    "es": ("es-ES", "es-ES-ElviraNeural"),
    "es-es": ("es-ES", "es-ES-ElviraNeural"),
    "de": ("de-DE", "de-DE-KatjaNeural"),
    "de-de": ("de-DE", "de-DE-KatjaNeural"),
    "it": ("it-IT", "it-IT-ElsaNeural"),
    "it-it": ("it-IT", "it-IT-ElsaNeural"),
    "pt": ("pt-PT", "pt-PT-FernandaNeural"),
    "pt-pt": ("pt-PT", "pt-PT-FernandaNeural"),
    "pt-br": ("pt-BR", "pt-BR-FranciscaNeural"),
    "pl": ("pl-PL", "pl-PL-ZofiaNeural"),
    "pl-pl": ("pl-PL", "pl-PL-ZofiaNeural"),
    "ru": ("ru-RU", "ru-RU-DmitryNeural"),
    "ru-ru": ("ru-RU", "ru-RU-DmitryNeural"),
    "tr": ("tr-TR", "tr-TR-EmelNeural"),
    "tr-tr": ("tr-TR", "tr-TR-EmelNeural"),
    "ar": ("ar-EG", "ar-EG-SalmaNeural"),
    "ar-eg": ("ar-EG", "ar-EG-SalmaNeural"),
    "zh": ("zh-CN", "zh-CN-XiaoxiaoNeural"),
    "zh-hans": ("zh-CN", "zh-CN-XiaoxiaoNeural"),
    "zh-cn": ("zh-CN", "zh-CN-XiaoxiaoNeural"),
    "zh-hant": ("zh-TW", "zh-TW-HsiaoChenNeural"),
    "zh-tw": ("zh-TW", "zh-TW-HsiaoChenNeural"),
    "ja": ("ja-JP", "ja-JP-NanamiNeural"),
    "ja-jp": ("ja-JP", "ja-JP-NanamiNeural"),
    "ko": ("ko-KR", "ko-KR-SunHiNeural"),
    "ko-kr": ("ko-KR", "ko-KR-SunHiNeural"),
    "nl": ("nl-NL", "nl-NL-ColetteNeural"),
    "nl-nl": ("nl-NL", "nl-NL-ColetteNeural"),
    "sv": ("sv-SE", "sv-SE-HilleviNeural"),
    "sv-se": ("sv-SE", "sv-SE-HilleviNeural"),
}


def resolve_voice(
    language_hint: Optional[str],
    default: Optional[VoiceConfig] = None,
) -> VoiceConfig:
    """Map a language hint to a voice.

    Lookup is case-insensitive. Unknown or missing hints resolve to the
    default voice (en-GB Sonia unless overridden).
    """
    entry = _VOICE_TABLE.get((language_hint or "").strip().lower())
    if entry is None:
        return default or VoiceConfig(DEFAULT_LOCALE, DEFAULT_VOICE)
    return VoiceConfig(locale=entry[0], voice_id=entry[1])


def supported_hints() -> list[str]:
    """Return every language hint with a dedicated voice."""
    return sorted(_VOICE_TABLE)
