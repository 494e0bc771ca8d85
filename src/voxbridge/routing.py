"""
Reply language routing.

Speech detection reports ``auto`` for silent or ambiguous input, so the
router walks the history backwards and picks the most recent confident
language a user actually spoke, falling back to English.
"""

from collections.abc import Sequence
from typing import Optional

from .models import AUTO, ENGLISH, Message, Role


def is_definite(code: Optional[str]) -> bool:
    """Return True if ``code`` names a real language (not blank, not ``auto``)."""
    if code is None:
        return False
    code = code.strip()
    return bool(code) and code.lower() != AUTO


def resolve_reply_target(history: Sequence[Message]) -> str:
    """Choose the language an assistant reply should be translated into.

    Args:
        history: Messages of the conversation, oldest first.

    Returns:
        Source language of the most recent user message with a definite
        language, or ``"en"`` when there is none.
    """
    for message in reversed(history):
        if message.role is Role.USER and is_definite(message.source_lang):
            return message.source_lang.strip()
    return ENGLISH
