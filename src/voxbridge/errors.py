"""
Error taxonomy for the voice relay.

Adapters raise these at their boundary so the HTTP layer can map each
failure class to a status code without inspecting provider-specific
exceptions. Speech synthesis never raises: it degrades to silence and
reports a warning string instead.
"""


class RelayError(Exception):
    """Base exception for relay errors."""

    status_code: int = 500


class ValidationFailure(RelayError):
    """Raised when a required input is missing or empty."""

    status_code = 400


class ConversationNotFound(RelayError):
    """Raised when a turn requires a conversation that does not exist."""

    status_code = 400


class TranscriptionFailure(RelayError):
    """Raised when the speech-to-text provider call fails."""
    pass


class TranslationFailure(RelayError):
    """Raised when the translation provider call fails."""
    pass


class DuplicateReferenceError(RelayError):
    """Raised by ConversationStore.create() when a unique reference is already taken."""

    status_code = 409
