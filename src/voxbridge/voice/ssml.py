"""
Text preparation for speech markup.

Speech services reject SSML containing characters that are illegal in
XML 1.0, and refuse empty utterances outright.
"""

from xml.sax.saxutils import escape

MAX_UTTERANCE_CHARS = 4000

_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def _is_xml_char(ch: str) -> bool:
    cp = ord(ch)
    return (
        ch in "\t\n\r"
        or 0x20 <= cp <= 0xD7FF
        or 0xE000 <= cp <= 0xFFFD
    )


def sanitize(text: str | None) -> str:
    """Make text safe to speak.

    Drops characters outside the XML character range (keeping tab, LF and
    CR), truncates to 4000 characters and trims surrounding whitespace.
    A blank result becomes a single space.

    The operation is idempotent.
    """
    if not text:
        return " "
    cleaned = "".join(ch for ch in text if _is_xml_char(ch))
    cleaned = cleaned[:MAX_UTTERANCE_CHARS].strip()
    return cleaned or " "


def build_ssml(text: str, locale: str, voice: str) -> str:
    """Wrap already-sanitized text in a single-voice SSML document."""
    escaped = escape(text, _ENTITIES) or " "
    return (
        f'<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="{locale}">\n'
        f'  <voice name="{voice}" xml:lang="{locale}">{escaped}</voice>\n'
        f"</speak>"
    )
