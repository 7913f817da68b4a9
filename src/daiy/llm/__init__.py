from .adapter import ChatBackend, ProviderAdapter
from .base import LLMProvider
from .factory import create_llm_provider
from .models import AVAILABLE_MODELS, ChatMessage, LLMResponse, ModelInfo, ProviderName
from .providers import AnthropicProvider, GeminiProvider, GroqProvider, OpenAIProvider
from .routing import get_provider_for_model, resolve_credential

__all__ = [
    "AVAILABLE_MODELS",
    "AnthropicProvider",
    "ChatBackend",
    "ChatMessage",
    "GeminiProvider",
    "GroqProvider",
    "LLMProvider",
    "LLMResponse",
    "ModelInfo",
    "OpenAIProvider",
    "ProviderAdapter",
    "ProviderName",
    "create_llm_provider",
    "get_provider_for_model",
    "resolve_credential",
]
