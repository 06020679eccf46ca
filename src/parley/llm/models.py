from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Wrapper for streaming LLM responses that captures usage info.

    Acts as an async iterator for text chunks while storing token usage
    that becomes available at the end of the stream.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for chunk in stream:
            print(chunk, end="")
        print(stream.usage)
    """

    def __init__(self, async_iter: AsyncIterator[str]):
        self._iter = async_iter
        self._usage: dict[str, Any] | None = None

    @property
    def usage(self) -> dict[str, Any] | None:
        """Token usage info (available after iteration completes)."""
        return self._usage

    def set_usage(self, usage: dict[str, Any]) -> None:
        """Set token usage info (called by provider at end of stream)."""
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        return await self._iter.__anext__()


class ChatMessage(BaseModel):
    """A message as sent over the wire to a provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )


class ModelInfo(BaseModel):
    """A selectable model as listed by the setup wizard."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier passed to the provider API")
    name: str = Field(description="Human readable label")
