from typing import Any

from ..errors import UnknownProvider
from .base import LLMProvider
from .models import ProviderName
from .providers import AnthropicProvider, GeminiProvider, GroqProvider, OpenAIProvider

_PROVIDER_CLASSES: dict[str, type[LLMProvider]] = {
    ProviderName.GEMINI.value: GeminiProvider,
    ProviderName.OPENAI.value: OpenAIProvider,
    ProviderName.ANTHROPIC.value: AnthropicProvider,
    ProviderName.GROQ.value: GroqProvider,
}


def create_llm_provider(provider: str | ProviderName, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different
    providers. Every call returns a fresh instance; callers own it and
    close it when done.

    Args:
        provider: Provider type ('gemini', 'openai', 'anthropic', 'groq')
        **config: Provider-specific configuration
            For all providers:
                - api_key: str (required)
                - model: str
                - default_system: str (persona used when no system message)
            For OpenAI / Groq / Anthropic:
                - base_url: str | None

    Returns:
        Initialized LLM provider instance

    Raises:
        UnknownProvider: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "groq",
        ...     api_key="gsk-...",
        ...     model="llama-3.3-70b-versatile"
        ... )
    """
    name = provider.value if isinstance(provider, ProviderName) else str(provider).lower()

    provider_class = _PROVIDER_CLASSES.get(name)
    if provider_class is None:
        raise UnknownProvider(str(provider))

    if "api_key" not in config:
        raise TypeError(f"{name} provider requires 'api_key' in config")

    return provider_class(**config)
