"""
voxbridge - voice translation chat relay.

Transcribes what a remote speaker says, translates it to English, and
speaks English replies back in the speaker's own language.
"""

from .config import RelaySettings
from .orchestrator import ConversationOrchestrator
from .routing import resolve_reply_target
from .storage import ConversationStore
from .voice import VoiceSynthesisPipeline

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("voxbridge")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable

__all__ = [
    "ConversationOrchestrator",
    "ConversationStore",
    "RelaySettings",
    "VoiceSynthesisPipeline",
    "resolve_reply_target",
]
