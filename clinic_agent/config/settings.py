"""
Environment-based runtime settings.

Settings are read from the process environment (optionally populated from a
``.env`` file by python-dotenv) into a validated pydantic model. Missing
required values are reported as a ``ConfigurationError`` so that the server
refuses to start rather than failing on the first call.
"""

import os
from pathlib import Path
from typing import List, Optional

import dotenv
from pydantic import BaseModel, Field, field_validator

from clinic_agent.config.constants import (
    DEFAULT_BOOKING_TIMEOUT,
    DEFAULT_CHAT_MODEL,
    DEFAULT_FREQUENCY_PENALTY,
    DEFAULT_LOOKUP_TIMEOUT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MAX_TOOL_ROUNDS,
    DEFAULT_PRESENCE_PENALTY,
    DEFAULT_TEMPERATURE,
)

# Environment variable names that must be set before serving
REQUIRED_ENV_VARS = {
    "retell_api_key": "RETELL_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "scheduling_webhook_url": "N8N_WEBHOOK_URL",
}


class ConfigurationError(Exception):
    """Raised when required runtime configuration is missing or invalid."""


def load_env_file(path: Path = Path(".") / ".env") -> bool:
    """Load environment variables from a .env file if it exists."""
    if path.exists():
        return dotenv.load_dotenv(path)
    return False


class Settings(BaseModel):
    """Runtime configuration for the voice agent bridge."""

    retell_api_key: str = Field("", description="Voice platform API key, also the webhook signing secret")
    openai_api_key: str = Field("", description="LLM completion API key")
    scheduling_webhook_url: str = Field("", description="Downstream scheduling webhook URL")
    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(3000, description="Port to listen on")

    openai_model: str = DEFAULT_CHAT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    frequency_penalty: float = DEFAULT_FREQUENCY_PENALTY
    presence_penalty: float = DEFAULT_PRESENCE_PENALTY
    max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    booking_timeout: float = DEFAULT_BOOKING_TIMEOUT
    system_prompt_file: Optional[str] = None

    @field_validator("port")
    def validate_port(cls, v):
        """Validate that the port is in the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port: {v}")
        return v

    @field_validator("max_tool_rounds")
    def validate_max_tool_rounds(cls, v):
        """At least one round is needed to answer anything."""
        if v < 1:
            raise ValueError("max_tool_rounds must be at least 1")
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        values = {
            "retell_api_key": os.getenv("RETELL_API_KEY", ""),
            "openai_api_key": os.getenv("OPENAI_API_KEY", ""),
            "scheduling_webhook_url": os.getenv("N8N_WEBHOOK_URL", ""),
            "host": os.getenv("HOST", "0.0.0.0"),
            "port": os.getenv("PORT", "3000"),
            "openai_model": os.getenv("OPENAI_MODEL", DEFAULT_CHAT_MODEL),
            "temperature": os.getenv("OPENAI_TEMPERATURE", str(DEFAULT_TEMPERATURE)),
            "max_tokens": os.getenv("OPENAI_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)),
            "max_tool_rounds": os.getenv("MAX_TOOL_ROUNDS", str(DEFAULT_MAX_TOOL_ROUNDS)),
            "lookup_timeout": os.getenv("LOOKUP_TIMEOUT_SECONDS", str(DEFAULT_LOOKUP_TIMEOUT)),
            "booking_timeout": os.getenv("BOOKING_TIMEOUT_SECONDS", str(DEFAULT_BOOKING_TIMEOUT)),
            "system_prompt_file": os.getenv("SYSTEM_PROMPT_FILE") or None,
        }
        return cls(**values)

    def missing_required(self) -> List[str]:
        """Return the environment variable names of unset required settings."""
        return [
            env_name
            for field_name, env_name in REQUIRED_ENV_VARS.items()
            if not getattr(self, field_name)
        ]

    def require(self) -> "Settings":
        """
        Ensure every required setting is present.

        Raises:
            ConfigurationError: If one or more required settings are missing
        """
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return self

    def load_system_prompt(self, default: str) -> str:
        """Return the system prompt override file contents, or ``default``."""
        if not self.system_prompt_file:
            return default
        try:
            return Path(self.system_prompt_file).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Could not read system prompt file {self.system_prompt_file}: {e}"
            ) from e
