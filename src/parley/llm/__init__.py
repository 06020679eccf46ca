from .base import LLMProvider
from .catalog import fetch_models
from .errors import (
    LLMError,
    MissingApiKeyError,
    ProviderTransportError,
    UnsupportedProviderError,
    describe_error,
)
from .factory import create_llm_provider, supported_providers
from .models import ChatMessage, LLMResponse, ModelInfo, StreamingResponse
from .providers import AnthropicProvider, DeepSeekProvider, OllamaProvider, OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "supported_providers",
    "fetch_models",
    "ChatMessage",
    "LLMResponse",
    "ModelInfo",
    "StreamingResponse",
    "LLMError",
    "MissingApiKeyError",
    "ProviderTransportError",
    "UnsupportedProviderError",
    "describe_error",
    "AnthropicProvider",
    "DeepSeekProvider",
    "OllamaProvider",
    "OpenAIProvider",
]
