"""
Data models for the voice relay.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from shortuuid import random

AUTO = "auto"
ENGLISH = "en"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new random 12-character identifier."""
    return random(length=12)


class Role(str, Enum):
    """Author of a message within a conversation."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single utterance in a conversation.

    ``user`` messages are what the remote speaker said, tagged with the
    detected language. ``assistant`` messages are English replies, tagged
    ``en`` as source and the routed language as target.
    """
    id: str = Field(default_factory=new_id)
    conversation_id: str
    role: Role
    source_lang: str | None = None
    target_lang: str | None = None
    text: str = ""
    translation: str | None = None
    timestamp_utc: datetime = Field(default_factory=utc_now)
    audio_ref: str | None = None

    def to_history_item(self) -> dict[str, Any]:
        """Render the message in the history endpoint's wire shape."""
        return {
            "role": self.role.value,
            "text": self.text,
            "translation": self.translation,
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
            "timestampUtc": self.timestamp_utc.isoformat(),
        }


class Conversation(BaseModel):
    """A translated chat session and its ordered messages."""
    id: str = Field(default_factory=new_id)
    title: str = "Conversation"
    unique_ref: str | None = Field(default=None, max_length=64)
    created_utc: datetime = Field(default_factory=utc_now)
    messages: list[Message] = Field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """Short description used by the conversation listing."""
        return {
            "conversationId": self.id,
            "title": self.title,
            "uniqueRef": self.unique_ref,
            "createdUtc": self.created_utc.isoformat(),
            "messageCount": len(self.messages),
        }
