"""OpenAI-compatible chat completion request models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    # Plain text, a list of typed content items, or null
    content: str | list[Any] | dict[str, Any] | None = None


class ChatCompletionRequest(BaseModel):
    """Body of ``POST /v1/chat/completions``.

    Unknown fields are ignored so that clients sending the full OpenAI
    surface (tools, n, user, ...) still get a relay.
    """

    model_config = ConfigDict(extra="ignore")

    model: str
    messages: list[ChatMessage] = Field(default_factory=list)
    # Explicit nulls mean "not given"
    stream: bool | None = False
    max_tokens: int | None = None
    temperature: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    top_p: float | None = None
