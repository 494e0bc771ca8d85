"""
Conversation storage for the voice relay.

Thread-safe store with one JSON document per conversation. Documents are
loaded into memory on startup and rewritten on every mutation, so the
files on disk always hold the latest state of each conversation.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .errors import ConversationNotFound, DuplicateReferenceError
from .models import Conversation, Message

logger = logging.getLogger("voxbridge.storage")

MAX_LISTED = 200


class ConversationStore:
    """
    Persists conversations and their messages as JSON documents.

    The unique reference index is checked and updated under the same lock
    as insertion, so two concurrent creators of one reference always end
    up sharing a single conversation.

    Attributes:
        _conversations: conversation_id -> Conversation
        _refs: unique_ref -> conversation_id
        _lock: Threading lock for safe concurrent access
        _dir: Directory holding ``<conversation_id>.json`` documents
    """

    def __init__(self, data_dir: str | Path) -> None:
        """
        Initialize the store and restore existing conversations.

        Args:
            data_dir: Root data directory; documents are stored under
                      {data_dir}/conversations/
        """
        self._conversations: dict[str, Conversation] = {}
        self._refs: dict[str, str] = {}
        self._lock = threading.Lock()

        self._dir = Path(data_dir) / "conversations"
        self._dir.mkdir(parents=True, exist_ok=True)

        self._restore()

    def _restore(self) -> None:
        """Load every conversation document found on disk."""
        for path in sorted(self._dir.glob("*.json")):
            try:
                convo = Conversation.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable conversation file %s: %s", path.name, e)
                continue
            self._conversations[convo.id] = convo
            if convo.unique_ref:
                self._refs[convo.unique_ref] = convo.id

        if self._conversations:
            logger.info("Restored %d conversations from %s", len(self._conversations), self._dir)

    def _write(self, convo: Conversation) -> None:
        """Persist a conversation document, replacing the previous one."""
        path = self._dir / f"{convo.id}.json"
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(convo.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    def get(self, conversation_id: Optional[str]) -> Optional[Conversation]:
        """
        Look up a conversation by id.

        Returns:
            A copy of the conversation, or None if unknown
        """
        if not conversation_id:
            return None
        with self._lock:
            convo = self._conversations.get(conversation_id)
            return convo.model_copy(deep=True) if convo else None

    def create(self, title: str = "Conversation", unique_ref: Optional[str] = None) -> Conversation:
        """
        Create and persist a new, empty conversation.

        Request handling never calls this directly; it goes through
        find_or_create() and get_or_create_by_ref(). This entry point
        exists for seeding a store (tests, maintenance scripts) and,
        unlike those, refuses a reference that is already taken.

        Raises:
            DuplicateReferenceError: If unique_ref already belongs to a conversation
        """
        with self._lock:
            return self._create_locked(title, unique_ref)

    def _create_locked(self, title: str, unique_ref: Optional[str]) -> Conversation:
        if unique_ref and unique_ref in self._refs:
            raise DuplicateReferenceError(f"Unique reference already in use: {unique_ref}")

        convo = Conversation(title=title, unique_ref=unique_ref or None)
        self._write(convo)
        self._conversations[convo.id] = convo
        if convo.unique_ref:
            self._refs[convo.unique_ref] = convo.id

        logger.info("Conversation created: %s (ref=%s)", convo.id, unique_ref)
        return convo.model_copy(deep=True)

    def find_or_create(self, conversation_id: Optional[str]) -> tuple[Conversation, bool]:
        """
        Return the conversation with this id, creating a fresh one if absent.

        A newly created conversation receives its own id; callers must use
        the returned conversation's id from then on.

        Returns:
            (conversation, created)
        """
        with self._lock:
            existing = self._conversations.get(conversation_id) if conversation_id else None
            if existing is not None:
                return existing.model_copy(deep=True), False
            return self._create_locked("Conversation", None), True

    def get_or_create_by_ref(self, unique_ref: str) -> tuple[Conversation, bool]:
        """
        Idempotently open the conversation bound to an external reference.

        Returns:
            (conversation, created)
        """
        with self._lock:
            existing_id = self._refs.get(unique_ref)
            if existing_id is not None:
                return self._conversations[existing_id].model_copy(deep=True), False
            return self._create_locked(f"Translation {unique_ref}", unique_ref), True

    def append_message(self, message: Message) -> Message:
        """
        Append a message to its conversation and persist it.

        Raises:
            ConversationNotFound: If the owning conversation does not exist
        """
        with self._lock:
            convo = self._conversations.get(message.conversation_id)
            if convo is None:
                raise ConversationNotFound(
                    f"Conversation not found: {message.conversation_id}"
                )
            updated = convo.model_copy(update={"messages": [*convo.messages, message]})
            self._write(updated)
            self._conversations[updated.id] = updated

        logger.debug("Message %s appended to %s (%s)", message.id, message.conversation_id,
                     message.role.value)
        return message

    def messages(self, conversation_id: str) -> list[Message]:
        """Return the ordered messages of a conversation (empty if unknown)."""
        with self._lock:
            convo = self._conversations.get(conversation_id)
            return [m.model_copy() for m in convo.messages] if convo else []

    def list_conversations(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        unique_ref: Optional[str] = None,
        limit: int = MAX_LISTED,
    ) -> list[Conversation]:
        """
        List conversations, newest first.

        Args:
            date_from: Only conversations created at or after this instant
            date_to: Only conversations created before this instant
            unique_ref: Substring the unique reference must contain
            limit: Maximum number of results

        Returns:
            List of conversation copies
        """
        with self._lock:
            items = list(self._conversations.values())

        if unique_ref:
            items = [c for c in items if c.unique_ref and unique_ref in c.unique_ref]
        if date_from is not None:
            items = [c for c in items if c.created_utc >= date_from]
        if date_to is not None:
            items = [c for c in items if c.created_utc < date_to]

        items.sort(key=lambda c: c.created_utc, reverse=True)
        return [c.model_copy(deep=True) for c in items[:limit]]

    def count(self) -> int:
        """Return the number of stored conversations."""
        with self._lock:
            return len(self._conversations)
