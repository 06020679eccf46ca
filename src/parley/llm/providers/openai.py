from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI

from ..base import LLMProvider
from ..errors import ProviderTransportError
from ..models import ChatMessage, LLMResponse, StreamingResponse


def _to_openai_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": msg.role, "content": msg.content} for msg in messages]


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation.

    Also the base for every backend that speaks the OpenAI Chat
    Completions protocol (DeepSeek, Ollama).

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Mapping SDK exceptions to ProviderTransportError
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.7,
        timeout_ms: int = 60000,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            base_url: Optional custom API base URL
            max_tokens: Default completion limit (None lets the API decide)
            temperature: Default sampling temperature
            timeout_ms: Request timeout in milliseconds
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = AsyncOpenAI(
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
        temperature = kwargs.pop("temperature", self._temperature)
        max_tokens = kwargs.pop("max_tokens", self._max_tokens)
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": _to_openai_messages(messages),
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        return request_params

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            LLMResponse with generated content
        """
        request_params = self._request_params(messages, model, **kwargs)
        try:
            completion = await self._client.chat.completions.create(**request_params)
        except openai.OpenAIError as e:
            raise ProviderTransportError(f"{self.name}: {e}") from e

        if not completion.choices:
            raise ProviderTransportError(f"{self.name}: response contained no choices")

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model or request_params["model"],
            usage=usage
        )

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion.

        Returns:
            StreamingResponse that yields text chunks and captures usage info
        """
        request_params = self._request_params(messages, model, **kwargs)
        response = StreamingResponse(self._stream_generator(request_params))
        self._current_stream_response = response
        return response

    async def _stream_generator(self, request_params: dict[str, Any]) -> AsyncIterator[str]:
        """Internal generator that yields chunks and captures usage."""
        try:
            stream = await self._client.chat.completions.create(
                stream=True,
                stream_options={"include_usage": True},
                **request_params,
            )
            async for chunk in stream:
                if chunk.usage is not None:
                    self._current_stream_response.set_usage({
                        "prompt_tokens": chunk.usage.prompt_tokens,
                        "completion_tokens": chunk.usage.completion_tokens,
                        "total_tokens": chunk.usage.total_tokens,
                    })
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except openai.OpenAIError as e:
            raise ProviderTransportError(f"{self.name}: {e}") from e

    async def close(self) -> None:
        """Close the underlying HTTP client.

        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
