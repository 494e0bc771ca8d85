"""
Turn orchestration for the voice relay.

Each API call is one turn and runs its stages strictly in sequence:

  transcribe -> route -> translate -> synthesize -> persist

Stages hand each other typed values (Transcript -> RoutedReply ->
TranslatedReply -> SynthesizedReply), and only a SynthesizedReply can be
persisted, so no stage can run before its predecessor has succeeded.
A transcription or translation failure aborts the turn before anything
is written; synthesis never fails (it degrades to silence). If the
calling task is cancelled mid-turn the persist stage is never reached.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from .errors import ConversationNotFound, ValidationFailure
from .models import ENGLISH, Conversation, Message, Role
from .routing import is_definite, resolve_reply_target
from .speech.transcription import Transcript, TranscriptionAdapter
from .speech.translation import TranslationAdapter
from .storage import ConversationStore
from .voice.pipeline import SpeechResult, VoiceSynthesisPipeline

logger = logging.getLogger("voxbridge.orchestrator")

AudioInput = Union[bytes, BinaryIO]

_AUDIO_EXTENSIONS = {"audio/mpeg": "mp3", "audio/wav": "wav"}


# ---------------------------------------------------------------------------
# Stage values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TranslatedUtterance:
    """A user's transcribed speech with its English translation."""

    transcript: Transcript
    detected_language: str
    translation: str


@dataclass(frozen=True)
class RoutedReply:
    """An English reply with the language it must be delivered in."""

    conversation: Conversation
    text: str
    target: str


@dataclass(frozen=True)
class TranslatedReply:
    routed: RoutedReply
    translation: str


@dataclass(frozen=True)
class SynthesizedReply:
    translated: TranslatedReply
    speech: SpeechResult


# ---------------------------------------------------------------------------
# Turn results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TranscribeResult:
    conversation_id: str
    text: str
    detected_language: str
    translated: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "conversationId": self.conversation_id,
            "text": self.text,
            "detectedLanguage": self.detected_language,
            "translated": self.translated,
        }


@dataclass(frozen=True)
class ReplyResult:
    conversation_id: str
    text: str
    translated: str
    target: str
    speech: SpeechResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "conversationId": self.conversation_id,
            "translated": self.translated,
            "target": self.target,
            "audioBase64": self.speech.data_url(),
            "audioLength": len(self.speech.audio),
            "audioContentType": self.speech.content_type,
            "ttsSource": self.speech.source,
            "ttsErr": self.speech.warning,
        }


@dataclass(frozen=True)
class VoiceReplyResult(ReplyResult):
    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({
            "text": self.text,
            "sttLen": len(self.text),
            "transLen": len(self.translated),
        })
        return payload


@dataclass(frozen=True)
class NoSpeechResult:
    """Voice reply that contained no speech; nothing was recorded."""

    conversation_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "conversationId": self.conversation_id,
            "text": "",
            "translated": "",
            "target": None,
            "audioBase64": "",
            "audioLength": 0,
            "audioContentType": "audio/mpeg",
            "note": "no_speech",
            "sttLen": 0,
            "transLen": 0,
        }


def _read_audio(audio: Optional[AudioInput]) -> bytes:
    """Buffer an audio payload, rejecting missing or empty input."""
    if audio is None:
        raise ValidationFailure("No audio provided.")
    data = bytes(audio) if isinstance(audio, (bytes, bytearray)) else audio.read()
    if not data:
        raise ValidationFailure("No audio provided.")
    return data


class ConversationOrchestrator:
    """
    Runs transcribe, reply and voice-reply turns against one store.

    The orchestrator holds no per-turn state: everything that survives a
    turn lives in the ConversationStore.

    Attributes:
        store: Conversation persistence
        transcriber: Speech-to-text adapter
        translator: Translation adapter
        voice: Tiered speech synthesis
        audio_dir: If set, reply audio is archived here
    """

    def __init__(
        self,
        store: ConversationStore,
        transcriber: TranscriptionAdapter,
        translator: TranslationAdapter,
        voice: VoiceSynthesisPipeline,
        audio_dir: Optional[Path] = None,
    ) -> None:
        self.store = store
        self.transcriber = transcriber
        self.translator = translator
        self.voice = voice
        self.audio_dir = Path(audio_dir) if audio_dir else None
        if self.audio_dir:
            self.audio_dir.mkdir(parents=True, exist_ok=True)

    # -- stages ------------------------------------------------------------

    async def translate_utterance(self, transcript: Transcript) -> TranslatedUtterance:
        detected, english = await self.translator.detect_and_translate(transcript.text, ENGLISH)
        if not is_definite(detected) and is_definite(transcript.language):
            # translator gave no detection; keep what speech recognition heard
            detected = transcript.language.strip()
        return TranslatedUtterance(transcript, detected, english)

    def route(self, conversation: Conversation, text: str) -> RoutedReply:
        target = resolve_reply_target(conversation.messages)
        logger.debug("Routed reply for %s to '%s'", conversation.id, target)
        return RoutedReply(conversation, text, target)

    async def translate_reply(self, routed: RoutedReply) -> TranslatedReply:
        translation = await self.translator.translate(routed.text, routed.target)
        return TranslatedReply(routed, translation)

    async def synthesize_reply(self, translated: TranslatedReply) -> SynthesizedReply:
        speech = await self.voice.speak(translated.translation, translated.routed.target)
        if speech.warning:
            logger.warning(
                "Degraded TTS for %s (source=%s): %s",
                translated.routed.conversation.id,
                speech.source,
                speech.warning,
            )
        return SynthesizedReply(translated, speech)

    def persist_utterance(self, conversation: Conversation, utterance: TranslatedUtterance) -> Message:
        message = Message(
            conversation_id=conversation.id,
            role=Role.USER,
            source_lang=utterance.detected_language,
            target_lang=ENGLISH,
            text=utterance.transcript.text,
            translation=utterance.translation,
        )
        return self.store.append_message(message)

    def persist_reply(self, synthesized: SynthesizedReply) -> Message:
        routed = synthesized.translated.routed
        message = Message(
            conversation_id=routed.conversation.id,
            role=Role.ASSISTANT,
            source_lang=ENGLISH,
            target_lang=routed.target,
            text=routed.text,
            translation=synthesized.translated.translation,
        )
        if self.audio_dir:
            message.audio_ref = self._archive_audio(message.id, synthesized.speech)
        return self.store.append_message(message)

    def _archive_audio(self, message_id: str, speech: SpeechResult) -> str:
        ext = _AUDIO_EXTENSIONS.get(speech.content_type, "bin")
        path = self.audio_dir / f"{message_id}.{ext}"
        path.write_bytes(speech.audio)
        return path.name

    # -- turns -------------------------------------------------------------

    async def transcribe_turn(
        self, conversation_id: Optional[str], audio: Optional[AudioInput]
    ) -> TranscribeResult:
        """The remote speaker talks: transcribe, translate to English, record.

        Raises:
            ValidationFailure: If no audio was supplied.
            TranscriptionFailure: If speech recognition fails.
            TranslationFailure: If translation fails.
        """
        data = _read_audio(audio)

        transcript = await self.transcriber.transcribe(data)
        utterance = await self.translate_utterance(transcript)

        conversation, created = self.store.find_or_create(conversation_id)
        if created:
            logger.info("Started conversation %s on first transcription", conversation.id)
        self.persist_utterance(conversation, utterance)

        return TranscribeResult(
            conversation_id=conversation.id,
            text=transcript.text,
            detected_language=utterance.detected_language,
            translated=utterance.translation,
        )

    async def reply_turn(self, conversation_id: Optional[str], text: Optional[str]) -> ReplyResult:
        """The operator types an English reply: route, translate, speak, record.

        Raises:
            ValidationFailure: If the text is blank.
            TranslationFailure: If translation fails.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationFailure("No reply text provided.")

        conversation, _ = self.store.find_or_create(conversation_id)
        synthesized = await self._deliver(self.route(conversation, text))
        self.persist_reply(synthesized)

        translated = synthesized.translated
        return ReplyResult(
            conversation_id=conversation.id,
            text=text,
            translated=translated.translation,
            target=translated.routed.target,
            speech=synthesized.speech,
        )

    async def voice_reply_turn(
        self, conversation_id: Optional[str], audio: Optional[AudioInput]
    ) -> Union[VoiceReplyResult, NoSpeechResult]:
        """The operator speaks an English reply into an existing conversation.

        Returns:
            NoSpeechResult when the recording holds no speech (nothing is
            recorded), otherwise the full reply payload.

        Raises:
            ValidationFailure: If no audio was supplied.
            ConversationNotFound: If the conversation does not exist.
            TranscriptionFailure: If speech recognition fails.
            TranslationFailure: If translation fails.
        """
        data = _read_audio(audio)
        conversation = self.store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFound("Conversation not found. Start by speaking first.")

        transcript = await self.transcriber.transcribe(data)
        if transcript.is_empty:
            logger.info("Voice reply for %s contained no speech", conversation.id)
            return NoSpeechResult(conversation.id)

        synthesized = await self._deliver(self.route(conversation, transcript.text))
        self.persist_reply(synthesized)

        translated = synthesized.translated
        return VoiceReplyResult(
            conversation_id=conversation.id,
            text=transcript.text,
            translated=translated.translation,
            target=translated.routed.target,
            speech=synthesized.speech,
        )

    async def _deliver(self, routed: RoutedReply) -> SynthesizedReply:
        return await self.synthesize_reply(await self.translate_reply(routed))

    # -- reads and administration -------------------------------------------

    def history(self, conversation_id: str) -> list[Message]:
        """Ordered messages of a conversation; empty for unknown ids."""
        return self.store.messages(conversation_id)

    def open_conversation(self, unique_ref: Optional[str]) -> tuple[Conversation, bool]:
        """Create or look up the conversation bound to an external reference.

        Raises:
            ValidationFailure: If the reference is blank or too long.
        """
        unique_ref = (unique_ref or "").strip()
        if not unique_ref:
            raise ValidationFailure("Unique Ref is required.")
        if len(unique_ref) > 64:
            raise ValidationFailure("Unique Ref must be at most 64 characters.")
        return self.store.get_or_create_by_ref(unique_ref)

    def list_conversations(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        unique_ref: Optional[str] = None,
    ) -> list[Conversation]:
        return self.store.list_conversations(date_from, date_to, unique_ref)
