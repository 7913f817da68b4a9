from typing import Any

from .openai import OpenAIProvider

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqProvider(OpenAIProvider):
    """Groq provider using the OpenAI-compatible API.

    Hidden design decisions:
    - Groq endpoint selection (via OpenAI SDK base_url)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.3-70b-versatile",
        default_system: str = "",
        base_url: str = GROQ_BASE_URL,
        **client_kwargs: Any
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            default_system=default_system,
            base_url=base_url,
            **client_kwargs
        )
