"""Anthropic Claude LLM provider implementation.

Uses the official Anthropic Python SDK for async chat completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..errors import ProviderTransportError
from ..models import ChatMessage, LLMResponse, StreamingResponse


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - Message format conversion (system message handling)
    - Mapping SDK exceptions to ProviderTransportError
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.7,
        timeout_ms: int = 60000,
        **client_kwargs: Any
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Default model to use
            base_url: Optional custom API base URL
            max_tokens: Completion limit (Anthropic requires one; default 4096)
            temperature: Default sampling temperature
            timeout_ms: Request timeout in milliseconds
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._max_tokens = max_tokens or 4096
        self._temperature = temperature
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_ms / 1000,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    def _request_params(
        self,
        messages: list[ChatMessage],
        model: str | None,
        **kwargs: Any
    ) -> dict[str, Any]:
        # Anthropic takes the system prompt out of band
        system_message = None
        anthropic_messages = []
        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                anthropic_messages.append({"role": msg.role, "content": msg.content})

        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": anthropic_messages,
            "temperature": kwargs.pop("temperature", self._temperature),
            "max_tokens": kwargs.pop("max_tokens", self._max_tokens),
            **kwargs
        }
        if system_message:
            request_params["system"] = system_message
        return request_params

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Anthropic Claude."""
        request_params = self._request_params(messages, model, **kwargs)
        try:
            response = await self._client.messages.create(**request_params)
        except anthropic.AnthropicError as e:
            raise ProviderTransportError(f"{self.name}: {e}") from e

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens
            }

        # A response may carry several content blocks
        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        return LLMResponse(content=content, model=response.model, usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion using Anthropic Claude."""
        request_params = self._request_params(messages, model, **kwargs)
        response = StreamingResponse(self._stream_generator(request_params))
        self._current_stream_response = response
        return response

    async def _stream_generator(
        self,
        request_params: dict[str, Any],
    ) -> AsyncIterator[str]:
        """Internal generator that yields text and captures usage from events."""
        input_tokens = 0
        output_tokens = 0

        try:
            async with self._client.messages.stream(**request_params) as stream:
                async for event in stream:
                    event_type = getattr(event, "type", None)
                    if event_type == "message_start":
                        input_tokens = event.message.usage.input_tokens
                    elif event_type == "message_delta":
                        output_tokens = getattr(event.usage, "output_tokens", output_tokens)
                    elif event_type == "content_block_delta" and hasattr(event.delta, "text"):
                        yield event.delta.text
        except anthropic.AnthropicError as e:
            raise ProviderTransportError(f"{self.name}: {e}") from e

        self._current_stream_response.set_usage({
            "prompt_tokens": input_tokens,
            "completion_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        })

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
