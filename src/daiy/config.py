"""Runtime configuration.

Settings are read from the environment (optionally populated from a
``.env`` file) and validated with pydantic. Nothing else in the package
reads environment variables directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "llama-3.3-70b-versatile"


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns INFO if invalid."""
        return cls._from_string.get(level_str.strip().lower(), cls.INFO)


class PacingConfig(BaseModel):
    """Delays (in seconds) used when replaying non-streamed reasoning lines."""

    model_config = ConfigDict(frozen=True)

    step_delay: float = Field(default=0.4, ge=0.0, description="Pause after each decomposition step")
    critique_delay: float = Field(default=0.3, ge=0.0, description="Pause after the critiquing line")
    refine_delay: float = Field(default=0.3, ge=0.0, description="Pause after the refining line")
    validate_delay: float = Field(default=0.2, ge=0.0, description="Pause after the validating line")


class Settings(BaseModel):
    """Server and client configuration."""

    model_config = ConfigDict(frozen=True)

    gemini_api_key: str | None = Field(default=None, description="Server-side Gemini fallback key")
    groq_api_key: str | None = Field(default=None, description="Server-side Groq fallback key")
    default_model: str = Field(default=DEFAULT_MODEL)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    log_level: str = Field(default="info")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)
    memory_backend: str = Field(default="memory", description="'memory' or 'sqlite'")
    memory_path: Path = Field(default=Path("./daiy_conversations.db"))

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """Build settings from environment variables.

        Environment variables:
            GEMINI_API_KEY: Fallback key for gemini models
            GROQ_API_KEY: Fallback key for groq models
            DAIY_DEFAULT_MODEL: Model used when a request names none
            DAIY_STEP_DELAY_MS: Pause between replayed reasoning steps (default: 400)
            DAIY_LOG_LEVEL: debug, info, warning or error (default: info)
            DAIY_HOST / DAIY_PORT: Bind address for ``daiy serve``
            DAIY_MEMORY_BACKEND: memory or sqlite (default: memory)
            DAIY_MEMORY_PATH: SQLite database path
        """
        load_dotenv(env_file)

        step_delay_ms = int(os.getenv("DAIY_STEP_DELAY_MS", "400"))

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            default_model=os.getenv("DAIY_DEFAULT_MODEL", DEFAULT_MODEL),
            pacing=PacingConfig(step_delay=step_delay_ms / 1000),
            log_level=os.getenv("DAIY_LOG_LEVEL", "info"),
            host=os.getenv("DAIY_HOST", "127.0.0.1"),
            port=int(os.getenv("DAIY_PORT", "8000")),
            memory_backend=os.getenv("DAIY_MEMORY_BACKEND", "memory").lower(),
            memory_path=Path(os.getenv("DAIY_MEMORY_PATH", "./daiy_conversations.db")),
        )
