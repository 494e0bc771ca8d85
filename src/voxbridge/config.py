"""
Configuration model for the voice relay.

Settings are read from ``VOXBRIDGE_*`` environment variables, optionally
seeded from a ``.env`` file in the working directory.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("voxbridge.config")

ENV_PREFIX = "VOXBRIDGE_"

KNOWN_TIERS = ("rest", "sdk", "fallback")


class RelaySettings(BaseModel):
    """Runtime settings for the relay server and its capability providers."""

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="HTTP port")
    log_level: str = Field(default="INFO", description="Root logging level")
    data_dir: Path = Field(
        default=Path("voxbridge_data"),
        description="Directory holding persisted conversations",
    )
    audio_dir: Optional[Path] = Field(
        default=None,
        description="If set, synthesized reply audio is archived here",
    )

    # Speech-to-text (Azure OpenAI Whisper)
    openai_endpoint: str = Field(default="", description="Azure OpenAI endpoint URL")
    openai_key: str = Field(default="", description="Azure OpenAI API key")
    whisper_deployment: str = Field(
        default="whisper",
        description="Deployment name of the Whisper model",
    )
    openai_api_version: str = Field(default="2024-06-01")

    # Translation (Azure Translator)
    translator_key: str = Field(default="")
    translator_region: str = Field(default="")
    translator_endpoint: str = Field(
        default="https://api.cognitive.microsofttranslator.com",
    )

    # Text-to-speech (Azure Speech)
    speech_key: str = Field(default="")
    speech_region: str = Field(default="")
    speech_voice: str = Field(
        default="en-GB-SoniaNeural",
        description="Voice used when no language hint maps to a voice",
    )
    tts_tiers: list[str] = Field(
        default_factory=lambda: list(KNOWN_TIERS),
        description="Ordered synthesis tiers; silence is always appended last",
    )

    provider_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds before a provider call is abandoned",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("tts_tiers", mode="before")
    @classmethod
    def validate_tts_tiers(cls, v: Any) -> list[str]:
        """Accept a comma-separated string or a list of tier names."""
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",") if part.strip()]
        tiers = [str(t).lower() for t in v]
        unknown = [t for t in tiers if t not in KNOWN_TIERS]
        if unknown:
            raise ValueError(
                f"Unknown TTS tier(s) {unknown}; expected any of {', '.join(KNOWN_TIERS)}"
            )
        return tiers

    @classmethod
    def from_env(cls, env: Optional[dict[str, str]] = None, **overrides: Any) -> "RelaySettings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ``. When omitted, a
                 ``.env`` file is loaded first if present.
            **overrides: Explicit values that win over the environment.

        Returns:
            Validated settings.
        """
        if env is None:
            if not load_dotenv(find_dotenv(usecwd=True)):
                logger.debug(".env file not found, using process environment only")
            env = dict(os.environ)

        values: dict[str, Any] = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in env and env[key] != "":
                values[name] = env[key]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
