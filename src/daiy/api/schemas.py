"""Request and response bodies for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..llm.models import ChatMessage, ModelInfo


class ApiKeys(BaseModel):
    """Per-provider keys supplied by the user's settings."""

    openai: str | None = None
    anthropic: str | None = None
    google: str | None = None
    groq: str | None = None


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat``.

    Field names follow the browser client (``apiKeys``,
    ``extendedThinking``); snake_case names are accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] | None = None
    model: str | None = Field(default=None, description="Model id; the server default when omitted")
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")
    extended_thinking: bool = Field(default=False, alias="extendedThinking")

    @field_validator("api_keys", "extended_thinking", mode="before")
    @classmethod
    def null_means_default(cls, value, info):
        """Treat an explicit ``null`` like an omitted field."""
        if value is not None:
            return value
        return {} if info.field_name == "api_keys" else False


class ErrorBody(BaseModel):
    """JSON body of every pre-stream failure."""

    error: str


class ModelsResponse(BaseModel):
    models: list[ModelInfo]
    default_model: str
