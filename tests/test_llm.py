"""Unit tests for the provider adapter, routing and credentials."""
from typing import Any

import pytest

from daiy.config import Settings
from daiy.errors import BadRequest, MissingCredential, UnknownProvider
from daiy.llm import (
    AnthropicProvider,
    GeminiProvider,
    GroqProvider,
    OpenAIProvider,
    ProviderAdapter,
    ProviderName,
    create_llm_provider,
    get_provider_for_model,
    resolve_credential,
)
from daiy.llm.base import LLMProvider, split_system_message
from daiy.llm.models import ChatMessage, LLMResponse, StreamingResponse
from daiy.llm.providers.anthropic import COMPLETION_MAX_TOKENS
from daiy.llm.providers.groq import GROQ_BASE_URL

CONVERSATION = [
    ChatMessage(role="user", content="What is 2 + 2?"),
    ChatMessage(role="assistant", content="What do you get if you count two more from two?"),
    ChatMessage(role="user", content="4"),
]


class StubProvider(LLMProvider):
    """Provider returning canned output and recording what it was given."""

    instances: list["StubProvider"] = []

    def __init__(self, api_key: str, model: str = "stub", default_system: str = "", chunks=()):
        self.api_key = api_key
        self._model = model
        self.default_system = default_system
        self.chunks = list(chunks) or ["Think ", "", "again."]
        self.received: list[ChatMessage] | None = None
        self.closed = False
        StubProvider.instances.append(self)

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(self, messages, model=None, temperature=0.8, max_tokens=None, **kwargs):
        self.received = messages
        return LLMResponse(content="analysis", model=model or self._model)

    async def chat_completion_stream(self, messages, model=None, temperature=None, max_tokens=None, **kwargs):
        self.received = messages

        async def _gen():
            for chunk in self.chunks:
                yield chunk

        return StreamingResponse(_gen())

    async def close(self) -> None:
        self.closed = True


def stub_factory(provider: Any, **config: Any) -> StubProvider:
    return StubProvider(**config)


class TestProviderRouting:
    """Tests for model-to-provider routing."""

    @pytest.mark.parametrize("model_id,expected", [
        ("gemini-2.5-flash", ProviderName.GEMINI),
        ("gpt-4o", ProviderName.OPENAI),
        ("gpt-4o-mini", ProviderName.OPENAI),
        ("claude-sonnet-4-20250514", ProviderName.ANTHROPIC),
        ("llama-3.3-70b-versatile", ProviderName.GROQ),
        ("mixtral-groq-8x7b", ProviderName.GROQ),
    ])
    def test_prefix_rules(self, model_id: str, expected: ProviderName):
        """Test the prefix rules for known model families."""
        assert get_provider_for_model(model_id) == expected

    def test_unknown_model_falls_back_to_groq(self):
        """Test the fallback for unrecognised model ids."""
        assert get_provider_for_model("mistral-large") == ProviderName.GROQ


class TestResolveCredential:
    """Tests for credential resolution."""

    def test_request_key_wins(self):
        """Test that the request's key is preferred over the server key."""
        settings = Settings(groq_api_key="server")

        assert resolve_credential(ProviderName.GROQ, {"groq": "request"}, settings) == "request"

    def test_server_fallback_for_gemini_and_groq(self):
        """Test the server-side fallback keys."""
        settings = Settings(gemini_api_key="gem-server", groq_api_key="groq-server")

        assert resolve_credential(ProviderName.GEMINI, {}, settings) == "gem-server"
        assert resolve_credential(ProviderName.GROQ, None, settings) == "groq-server"

    def test_gemini_reads_google_key(self):
        """Test that gemini takes the request's google key."""
        assert resolve_credential(ProviderName.GEMINI, {"google": "g-key"}, Settings()) == "g-key"

    @pytest.mark.parametrize("provider", [ProviderName.OPENAI, ProviderName.ANTHROPIC])
    def test_no_server_fallback(self, provider: ProviderName):
        """Test that openai and anthropic never use server keys."""
        settings = Settings(gemini_api_key="x", groq_api_key="y")

        with pytest.raises(MissingCredential) as exc_info:
            resolve_credential(provider, {}, settings)

        assert exc_info.value.message == (
            f"No API key available for {provider.value}. Please add one in Settings."
        )
        assert exc_info.value.status_code == 400

    def test_empty_string_is_missing(self):
        """Test that an empty request key counts as missing."""
        with pytest.raises(MissingCredential):
            resolve_credential(ProviderName.OPENAI, {"openai": ""}, Settings())


class TestSplitSystemMessage:
    """Tests for system message extraction."""

    def test_default_when_absent(self):
        """Test that the default persona is used without a system message."""
        system, turns = split_system_message(CONVERSATION, "persona")

        assert system == "persona"
        assert turns == CONVERSATION

    def test_first_system_message_wins(self):
        """Test that only the first system message is used."""
        messages = [
            ChatMessage(role="system", content="first"),
            *CONVERSATION,
            ChatMessage(role="system", content="second"),
        ]

        system, turns = split_system_message(messages, "persona")

        assert system == "first"
        assert turns == CONVERSATION


class TestProviderConversion:
    """Tests for per-backend message translation."""

    def test_openai_places_system_first(self):
        """Test the chat completions message shape."""
        provider = OpenAIProvider(api_key="sk-test", default_system="persona")

        converted = provider._convert_messages(CONVERSATION)

        assert converted[0] == {"role": "system", "content": "persona"}
        assert [m["role"] for m in converted[1:]] == ["user", "assistant", "user"]

    def test_groq_uses_openai_compatible_endpoint(self):
        """Test that groq is reached through its OpenAI-compatible URL."""
        provider = GroqProvider(api_key="gsk-test")

        assert isinstance(provider, OpenAIProvider)
        assert str(provider._client.base_url).rstrip("/") == GROQ_BASE_URL

    def test_anthropic_lifts_system(self):
        """Test that anthropic gets the system prompt as a parameter."""
        provider = AnthropicProvider(api_key="sk-ant-test", default_system="persona")
        messages = [ChatMessage(role="system", content="custom"), *CONVERSATION]

        params = provider._request_params(messages, None, COMPLETION_MAX_TOKENS, 0.8)

        assert params["system"] == "custom"
        assert [m["role"] for m in params["messages"]] == ["user", "assistant", "user"]
        assert params["max_tokens"] == 2048

    def test_gemini_renames_assistant(self):
        """Test that gemini receives assistant turns as model turns."""
        provider = GeminiProvider(api_key="gem-test", default_system="persona")

        system, contents = provider._convert_messages(CONVERSATION)

        assert system == "persona"
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[2].parts[0].text == "4"


class TestFactory:
    """Tests for create_llm_provider."""

    @pytest.mark.parametrize("name,cls", [
        ("openai", OpenAIProvider),
        ("anthropic", AnthropicProvider),
        ("gemini", GeminiProvider),
        ("groq", GroqProvider),
    ])
    def test_creates_provider(self, name: str, cls: type):
        """Test that each provider name maps to its class."""
        assert isinstance(create_llm_provider(name, api_key="key"), cls)

    def test_unknown_provider(self):
        """Test that an unsupported name is a bad request."""
        with pytest.raises(UnknownProvider, match="Unknown provider: openrouter") as exc_info:
            create_llm_provider("openrouter", api_key="key")
        assert isinstance(exc_info.value, BadRequest)

    def test_unknown_provider_checked_first(self):
        """Test that an unknown provider is reported even without a key."""
        with pytest.raises(UnknownProvider):
            create_llm_provider("openrouter")

    def test_requires_api_key(self):
        """Test that a missing api_key is rejected."""
        with pytest.raises(TypeError):
            create_llm_provider("openai")


class TestProviderAdapter:
    """Tests for the uniform adapter contract."""

    def setup_method(self):
        StubProvider.instances = []

    @pytest.mark.asyncio
    async def test_stream_chat_skips_empty_chunks(self):
        """Test that empty deltas are never yielded."""
        adapter = ProviderAdapter(provider_factory=stub_factory, default_system="persona")

        chunks = [c async for c in adapter.stream_chat("groq", "llama", CONVERSATION, "key")]

        assert chunks == ["Think ", "again."]

    @pytest.mark.asyncio
    async def test_provider_per_call(self):
        """Test that each call builds and closes its own provider."""
        adapter = ProviderAdapter(provider_factory=stub_factory, default_system="persona")

        await adapter.complete_chat("groq", "llama", CONVERSATION, "key-1")
        await adapter.complete_chat("groq", "llama", CONVERSATION, "key-2")

        first, second = StubProvider.instances
        assert first is not second
        assert (first.api_key, second.api_key) == ("key-1", "key-2")
        assert first.closed and second.closed
        assert first.default_system == "persona"

    @pytest.mark.asyncio
    async def test_complete_chat_returns_text(self):
        """Test that complete_chat returns the response content."""
        adapter = ProviderAdapter(provider_factory=stub_factory, default_system="persona")

        assert await adapter.complete_chat("groq", "llama", CONVERSATION, "key") == "analysis"
        assert StubProvider.instances[0].received == CONVERSATION

    def test_default_system_is_persona_prompt(self):
        """Test that the Socratic persona is the default system prompt."""
        adapter = ProviderAdapter(provider_factory=stub_factory)

        assert "Socratic" in adapter.default_system

    @pytest.mark.asyncio
    async def test_unknown_provider_raises(self):
        """Test that the real factory rejects unknown providers."""
        adapter = ProviderAdapter(default_system="persona")

        with pytest.raises(UnknownProvider):
            await adapter.complete_chat("openrouter", "x", CONVERSATION, "key")
