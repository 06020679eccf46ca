from abc import ABC, abstractmethod
from typing import Any, ClassVar

from .models import ChatMessage, LLMResponse, StreamingResponse


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which LLM provider to use.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request/response format conversion
    - Wrapping SDK failures in ProviderTransportError

    Whether a provider can stream is a property of the provider class
    (``supports_streaming``), decided once rather than per call.

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            response = await provider.chat_completion(messages)
    """

    name: ClassVar[str] = "base"
    supports_streaming: ClassVar[bool] = True

    @property
    @abstractmethod
    def model(self) -> str:
        """Get the default model name."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: List of chat messages forming the conversation history
            model: Model to use (None uses provider's default)
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            ProviderTransportError: Network or API failure
        """

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion.

        The returned StreamingResponse yields text chunks strictly in the
        order the provider produced them. Failures surface while iterating.

        Raises:
            ProviderTransportError: Network or API failure
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
