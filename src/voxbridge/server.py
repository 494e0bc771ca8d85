"""
HTTP API for the voice relay.

A Starlette app exposing the three turn endpoints plus history and
conversation lookup. Handlers only parse requests and shape responses;
all turn logic lives in ConversationOrchestrator.

Routes:
- GET  /api/history?conversationId=xxx - Ordered message history
- POST /api/transcribe                 - Remote speaker turn (multipart audio)
- POST /api/reply                      - Typed operator reply (multipart text)
- POST /api/reply-voice                - Spoken operator reply (multipart audio)
- POST /api/conversations              - Open a conversation by unique reference
- GET  /api/conversations              - List conversations
- GET  /status                         - Server health
"""

import contextlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Optional

from starlette.applications import Starlette
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .config import RelaySettings
from .errors import RelayError, ValidationFailure
from .orchestrator import ConversationOrchestrator
from .speech.transcription import TranscriptionAdapter, WhisperTranscriber
from .speech.translation import AzureTranslator, TranslationAdapter
from .storage import ConversationStore
from .voice.pipeline import VoiceSynthesisPipeline

logger = logging.getLogger("voxbridge.server")


def problem(title: str, detail: str, status_code: int) -> JSONResponse:
    """Build a problem-details response without exposing internals."""
    return JSONResponse(
        {"title": title, "detail": detail, "status": status_code},
        status_code=status_code,
        media_type="application/problem+json",
    )


async def _read_upload(value: Any) -> Optional[bytes]:
    """Return the bytes of a multipart file field, or None if absent."""
    if isinstance(value, UploadFile):
        return await value.read()
    return None


def _parse_date(value: Optional[str], field: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationFailure(f"Invalid date for '{field}': {value}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_orchestrator(settings: RelaySettings) -> ConversationOrchestrator:
    """Wire the store, adapters and TTS pipeline described by settings."""
    transcriber = TranscriptionAdapter(
        WhisperTranscriber(
            endpoint=settings.openai_endpoint,
            api_key=settings.openai_key,
            deployment=settings.whisper_deployment,
            api_version=settings.openai_api_version,
            timeout=settings.provider_timeout,
        )
    )
    translator = TranslationAdapter(
        AzureTranslator(
            key=settings.translator_key,
            region=settings.translator_region,
            endpoint=settings.translator_endpoint,
            timeout=settings.provider_timeout,
        )
    )
    return ConversationOrchestrator(
        store=ConversationStore(settings.data_dir),
        transcriber=transcriber,
        translator=translator,
        voice=VoiceSynthesisPipeline.from_settings(settings),
        audio_dir=settings.audio_dir,
    )


class RelayServer:
    """
    Starlette application wrapper for the relay API.

    Attributes:
        orchestrator: Turn orchestration over the shared store
        app: The Starlette application
        start_time: Server start timestamp
    """

    def __init__(self, orchestrator: ConversationOrchestrator) -> None:
        self.orchestrator = orchestrator
        self.start_time = datetime.now(timezone.utc)
        self.app = self._build_app()

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "RelayServer":
        return cls(build_orchestrator(settings))

    def _build_app(self) -> Starlette:
        routes = [
            Route("/api/history", self.get_history, methods=["GET"]),
            Route("/api/transcribe", self.post_transcribe, methods=["POST"]),
            Route("/api/reply", self.post_reply, methods=["POST"]),
            Route("/api/reply-voice", self.post_reply_voice, methods=["POST"]),
            Route("/api/conversations", self.post_conversation, methods=["POST"]),
            Route("/api/conversations", self.get_conversations, methods=["GET"]),
            Route("/status", self.get_status, methods=["GET"]),
        ]

        @contextlib.asynccontextmanager
        async def lifespan(app: Starlette):
            yield
            await self.orchestrator.voice.shutdown()

        return Starlette(debug=False, routes=routes, lifespan=lifespan)

    async def _run_turn(self, title: str, turn: Awaitable[Any]) -> Response:
        """Await a turn and convert any failure into a problem response."""
        try:
            result = await turn
        except RelayError as e:
            logger.warning("%s: %s", title, e)
            return problem(title, str(e), e.status_code)
        except Exception as e:
            logger.exception("%s: unexpected error", title)
            return problem(title, str(e), 500)
        return JSONResponse(result.to_dict())

    async def get_history(self, request: Request) -> Response:
        conversation_id = request.query_params.get("conversationId", "").strip()
        if not conversation_id:
            return problem("History failed", "conversationId is required.", 400)

        items = [m.to_history_item() for m in self.orchestrator.history(conversation_id)]
        return JSONResponse(items)

    async def post_transcribe(self, request: Request) -> Response:
        async with request.form() as form:
            conversation_id = form.get("conversationId") or None
            audio = await _read_upload(form.get("audio"))
        return await self._run_turn(
            "Transcription failed",
            self.orchestrator.transcribe_turn(conversation_id, audio),
        )

    async def post_reply(self, request: Request) -> Response:
        async with request.form() as form:
            conversation_id = form.get("conversationId") or None
            text = form.get("text")
        if isinstance(text, UploadFile):
            text = None
        return await self._run_turn(
            "Reply failed",
            self.orchestrator.reply_turn(conversation_id, text),
        )

    async def post_reply_voice(self, request: Request) -> Response:
        async with request.form() as form:
            conversation_id = form.get("conversationId") or None
            audio = await _read_upload(form.get("audio"))
        return await self._run_turn(
            "Voice reply failed",
            self.orchestrator.voice_reply_turn(conversation_id, audio),
        )

    async def post_conversation(self, request: Request) -> Response:
        """Open (create or find) the conversation for a unique reference."""
        if request.headers.get("content-type", "").startswith("application/json"):
            try:
                body = await request.json()
            except ValueError as e:
                return problem("Create conversation failed", f"Invalid request: {e}", 400)
            unique_ref = body.get("uniqueRef") if isinstance(body, dict) else None
        else:
            async with request.form() as form:
                unique_ref = form.get("uniqueRef")

        try:
            conversation, created = self.orchestrator.open_conversation(unique_ref)
        except RelayError as e:
            return problem("Create conversation failed", str(e), e.status_code)

        return JSONResponse(conversation.summary(), status_code=201 if created else 200)

    async def get_conversations(self, request: Request) -> Response:
        params = request.query_params
        try:
            date_from = _parse_date(params.get("from"), "from")
            date_to = _parse_date(params.get("to"), "to")
        except ValidationFailure as e:
            return problem("List conversations failed", str(e), 400)
        if date_to is not None:
            # "to" names a day and includes all of it
            date_to = date_to + timedelta(days=1)

        conversations = self.orchestrator.list_conversations(
            date_from=date_from,
            date_to=date_to,
            unique_ref=params.get("uniqueRef") or None,
        )
        return JSONResponse([c.summary() for c in conversations])

    async def get_status(self, request: Request) -> Response:
        uptime_seconds = (datetime.now(timezone.utc) - self.start_time).total_seconds()
        return JSONResponse({
            "status": "running",
            "uptime_seconds": uptime_seconds,
            "conversations": self.orchestrator.store.count(),
            "tts_tiers": self.orchestrator.voice.tiers,
        })


def create_app(settings: Optional[RelaySettings] = None) -> Starlette:
    """Application factory, usable as ``uvicorn voxbridge.server:create_app --factory``."""
    return RelayServer.from_settings(settings or RelaySettings.from_env()).app


__all__ = [
    "RelayServer",
    "build_orchestrator",
    "create_app",
    "problem",
]
