"""Model-to-provider routing and credential resolution."""

import logging
from collections.abc import Mapping

from ..config import Settings
from ..errors import MissingCredential
from ..utils import mask_api_key
from .models import ProviderName

logger = logging.getLogger(__name__)

# Which request key-map entry holds the credential for each provider.
_REQUEST_KEY_NAMES: dict[ProviderName, str] = {
    ProviderName.GEMINI: "google",
    ProviderName.OPENAI: "openai",
    ProviderName.ANTHROPIC: "anthropic",
    ProviderName.GROQ: "groq",
}


def get_provider_for_model(model_id: str) -> ProviderName:
    """Determine the provider for a model identifier.

    Unrecognised identifiers fall back to groq, the free tier. This is a
    deliberate fallback policy, logged so that it stays visible.
    """
    if model_id.startswith("gemini"):
        return ProviderName.GEMINI
    if model_id.startswith("gpt"):
        return ProviderName.OPENAI
    if model_id.startswith("claude"):
        return ProviderName.ANTHROPIC
    if model_id.startswith("llama") or "groq" in model_id:
        return ProviderName.GROQ

    logger.warning("No provider prefix matches model %r; routing to groq", model_id)
    return ProviderName.GROQ


def resolve_credential(
    provider: ProviderName,
    api_keys: Mapping[str, str | None] | None,
    settings: Settings,
) -> str:
    """Pick the API key for a provider.

    The request's per-provider key wins. Gemini and groq fall back to the
    server-side key from settings; openai and anthropic never do.

    Raises:
        MissingCredential: If no non-empty key is available
    """
    keys = api_keys or {}
    api_key = keys.get(_REQUEST_KEY_NAMES[provider]) or ""

    if not api_key:
        if provider is ProviderName.GEMINI:
            api_key = settings.gemini_api_key or ""
        elif provider is ProviderName.GROQ:
            api_key = settings.groq_api_key or ""

    if not api_key:
        raise MissingCredential(provider.value)

    logger.debug("Using %s key %s", provider.value, mask_api_key(api_key))
    return api_key
