"""
Tests for individual TTS engine wrappers.

The REST engine runs against an httpx MockTransport; Edge-TTS is mocked
at the module level since it talks to a live service.
"""

import io
import struct
import sys
import wave
from dataclasses import fields
from unittest.mock import MagicMock, patch

import httpx
import pytest

from voxbridge.voice.engines.azure_rest import OUTPUT_FORMAT, AzureRestEngine
from voxbridge.voice.engines.base import AudioFormat, TTSResult, VoiceConfig
from voxbridge.voice.engines.silence import SilenceEngine, wav_silence


# ---------------------------------------------------------------------------
# Base types
# ---------------------------------------------------------------------------


class TestVoiceConfig:
    def test_defaults(self) -> None:
        config = VoiceConfig()
        assert config.locale == "en-GB"
        assert config.voice_id == "en-GB-SoniaNeural"


class TestAudioFormat:
    def test_content_types(self) -> None:
        assert AudioFormat.MP3.content_type == "audio/mpeg"
        assert AudioFormat.WAV.content_type == "audio/wav"


class TestTTSResult:
    def test_carries_audio_format_and_provenance_only(self) -> None:
        assert [f.name for f in fields(TTSResult)] == ["audio_data", "format", "engine_name"]


# ---------------------------------------------------------------------------
# Silence engine
# ---------------------------------------------------------------------------


class TestWavSilence:
    def test_header_fields(self) -> None:
        data = wav_silence()
        assert data[:4] == b"RIFF"
        assert data[8:12] == b"WAVE"
        assert data[12:16] == b"fmt "
        assert struct.unpack("<I", data[4:8])[0] == 36 + 32000
        assert data[36:40] == b"data"
        assert struct.unpack("<I", data[40:44])[0] == 32000
        assert len(data) == 44 + 32000

    def test_decodes_as_one_second_of_pcm_silence(self) -> None:
        with wave.open(io.BytesIO(wav_silence()), "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getframerate() == 16000
            assert wav.getsampwidth() == 2
            assert wav.getnframes() == 16000
            assert set(wav.readframes(16000)) == {0}

    def test_duration_scales(self) -> None:
        assert len(wav_silence(seconds=2)) == 44 + 64000


class TestSilenceEngine:
    @pytest.mark.asyncio
    async def test_synthesize(self) -> None:
        engine = SilenceEngine()
        assert engine.name == "fallback"
        assert engine.is_available() is True

        result = await engine.synthesize("ignored")
        assert isinstance(result, TTSResult)
        assert result.format == AudioFormat.WAV
        assert result.audio_data == wav_silence()


# ---------------------------------------------------------------------------
# Azure REST engine
# ---------------------------------------------------------------------------


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestAzureRestEngine:
    def test_name_and_url(self) -> None:
        engine = AzureRestEngine("key", "westeurope")
        assert engine.name == "rest"
        assert engine.url == "https://westeurope.tts.speech.microsoft.com/cognitiveservices/v1"

    def test_not_available_without_credentials(self) -> None:
        assert AzureRestEngine("", "westeurope").is_available() is False
        assert AzureRestEngine("key", "").is_available() is False

    @pytest.mark.asyncio
    async def test_synthesize_raises_when_not_available(self) -> None:
        engine = AzureRestEngine("", "")
        with pytest.raises(RuntimeError, match="not available"):
            await engine.synthesize("test")

    @pytest.mark.asyncio
    async def test_synthesize_posts_ssml(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, content=b"ID3audio")

        engine = AzureRestEngine("secret", "westeurope", client=_client(handler))
        result = await engine.synthesize(
            "Ça & va", VoiceConfig("fr-FR", "fr-FR-DeniseNeural")
        )

        assert result.audio_data == b"ID3audio"
        assert result.format == AudioFormat.MP3
        assert result.engine_name == "rest"

        request = captured["request"]
        assert request.method == "POST"
        assert request.headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert request.headers["Ocp-Apim-Subscription-Region"] == "westeurope"
        assert request.headers["X-Microsoft-OutputFormat"] == OUTPUT_FORMAT
        assert request.headers["Content-Type"].startswith("application/ssml+xml")
        body = request.content.decode("utf-8")
        assert '<voice name="fr-FR-DeniseNeural" xml:lang="fr-FR">Ça &amp; va</voice>' in body

    @pytest.mark.asyncio
    async def test_http_error_raises_with_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="bad key")

        engine = AzureRestEngine("secret", "westeurope", client=_client(handler))
        with pytest.raises(RuntimeError, match="TTS HTTP 401 Unauthorized: bad key"):
            await engine.synthesize("Hello")

    @pytest.mark.asyncio
    async def test_timeout_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        engine = AzureRestEngine("secret", "westeurope", client=_client(handler))
        with pytest.raises(RuntimeError, match="timed out"):
            await engine.synthesize("Hello")

    @pytest.mark.asyncio
    async def test_connection_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        engine = AzureRestEngine("secret", "westeurope", client=_client(handler))
        with pytest.raises(RuntimeError, match="TTS request failed"):
            await engine.synthesize("Hello")


# ---------------------------------------------------------------------------
# Edge-TTS engine
# ---------------------------------------------------------------------------


class TestEdgeTTSEngine:
    def test_name(self) -> None:
        from voxbridge.voice.engines.edge_tts import EdgeTTSEngine

        assert EdgeTTSEngine().name == "sdk"

    def test_not_available_when_not_installed(self) -> None:
        from voxbridge.voice.engines.edge_tts import EdgeTTSEngine

        with patch(
            "voxbridge.voice.engines.edge_tts._check_edge_tts_available",
            return_value=False,
        ):
            engine = EdgeTTSEngine()
            assert engine.is_available() is False

    @pytest.mark.asyncio
    async def test_synthesize_raises_when_not_available(self) -> None:
        from voxbridge.voice.engines.edge_tts import EdgeTTSEngine

        with patch(
            "voxbridge.voice.engines.edge_tts._check_edge_tts_available",
            return_value=False,
        ):
            engine = EdgeTTSEngine()
            with pytest.raises(RuntimeError, match="not available"):
                await engine.synthesize("test")

    @pytest.mark.asyncio
    async def test_synthesize_with_mocked_edge_tts(self) -> None:
        from voxbridge.voice.engines.edge_tts import EdgeTTSEngine

        async def mock_stream():
            yield {"type": "audio", "data": b"\x00\x01\x02"}
            yield {"type": "WordBoundary", "data": "test"}
            yield {"type": "audio", "data": b"\x03\x04\x05"}

        mock_communicate = MagicMock()
        mock_communicate.stream = mock_stream

        mock_edge_module = MagicMock()
        mock_edge_module.Communicate.return_value = mock_communicate

        with patch.dict(sys.modules, {"edge_tts": mock_edge_module}):
            engine = EdgeTTSEngine()
            engine._available = True
            result = await engine.synthesize("Bonjour", VoiceConfig("fr-FR", "fr-FR-DeniseNeural"))

        assert result.engine_name == "sdk"
        assert result.format == AudioFormat.MP3
        assert result.audio_data == b"\x00\x01\x02\x03\x04\x05"
        mock_edge_module.Communicate.assert_called_once_with(
            "Bonjour", voice="fr-FR-DeniseNeural", connect_timeout=30.0, receive_timeout=30.0
        )

    @pytest.mark.asyncio
    async def test_stream_failure_is_wrapped(self) -> None:
        from voxbridge.voice.engines.edge_tts import EdgeTTSEngine

        async def broken_stream():
            raise ConnectionError("websocket closed")
            yield  # pragma: no cover

        mock_communicate = MagicMock()
        mock_communicate.stream = broken_stream
        mock_edge_module = MagicMock()
        mock_edge_module.Communicate.return_value = mock_communicate

        with patch.dict(sys.modules, {"edge_tts": mock_edge_module}):
            engine = EdgeTTSEngine()
            engine._available = True
            with pytest.raises(RuntimeError, match="Edge-TTS synthesis failed: websocket closed"):
                await engine.synthesize("Hello")

    @pytest.mark.asyncio
    async def test_configured_timeout_reaches_communicate(self) -> None:
        from voxbridge.config import RelaySettings
        from voxbridge.voice.pipeline import VoiceSynthesisPipeline

        async def mock_stream():
            yield {"type": "audio", "data": b"ID3"}

        mock_communicate = MagicMock()
        mock_communicate.stream = mock_stream
        mock_edge_module = MagicMock()
        mock_edge_module.Communicate.return_value = mock_communicate

        with patch.dict(sys.modules, {"edge_tts": mock_edge_module}):
            pipeline = VoiceSynthesisPipeline.from_settings(
                RelaySettings(tts_tiers="sdk", provider_timeout=5)
            )
            pipeline._engines[0]._available = True
            result = await pipeline.speak("Bonjour", "fr")

        assert result.source == "sdk"
        _, kwargs = mock_edge_module.Communicate.call_args
        assert kwargs == {
            "voice": "fr-FR-DeniseNeural",
            "connect_timeout": 5.0,
            "receive_timeout": 5.0,
        }
