from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .groq import GroqProvider
from .openai import OpenAIProvider

__all__ = ["AnthropicProvider", "GeminiProvider", "GroqProvider", "OpenAIProvider"]
