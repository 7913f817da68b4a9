"""Factory functions for CLI commands.

Centralizes creation of settings, clients and the conversation store from
environment variables. Hides configuration details from command
implementations.
"""

import os

from rich.console import Console

from ..client import ChatClient, LocalChatClient
from ..config import Settings
from ..logs import setup_logging
from ..memory import ConversationMemory, create_conversation_memory

# Default console for output
_console = Console()


def get_settings(env_file: str | None = None) -> Settings:
    """Load settings and configure logging from them."""
    settings = Settings.from_env(env_file)
    setup_logging(settings.log_level)
    return settings


def get_api_keys() -> dict[str, str | None]:
    """Per-provider keys forwarded with chat requests.

    Environment variables:
        OPENAI_API_KEY: Key for gpt-* models
        ANTHROPIC_API_KEY: Key for claude-* models
        GEMINI_API_KEY: Key for gemini-* models
        GROQ_API_KEY: Key for groq models
    """
    return {
        "openai": os.getenv("OPENAI_API_KEY") or None,
        "anthropic": os.getenv("ANTHROPIC_API_KEY") or None,
        "google": os.getenv("GEMINI_API_KEY") or None,
        "groq": os.getenv("GROQ_API_KEY") or None,
    }


def get_client(settings: Settings, url: str | None = None) -> ChatClient | LocalChatClient:
    """HTTP client for ``url``, or an in-process client when none is given."""
    if url:
        return ChatClient(base_url=url)
    return LocalChatClient(settings=settings)


def get_memory(settings: Settings, console: Console | None = None) -> ConversationMemory:
    """Create the conversation store selected by the settings.

    Args:
        settings: Runtime settings
        console: Optional Rich console for output
    """
    con = console or _console
    if settings.memory_backend == "sqlite":
        con.print(f"[dim]Storing conversations in {settings.memory_path}[/dim]")
        return create_conversation_memory("sqlite", path=settings.memory_path)
    return create_conversation_memory(settings.memory_backend)
