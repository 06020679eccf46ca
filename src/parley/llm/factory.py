from typing import Any

from .base import LLMProvider
from .errors import UnsupportedProviderError
from .providers import AnthropicProvider, DeepSeekProvider, OllamaProvider, OpenAIProvider

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "deepseek": DeepSeekProvider,
    "ollama": OllamaProvider,
}


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('anthropic', 'openai', 'deepseek', 'ollama')
        **config: Provider-specific configuration
            For Anthropic, OpenAI and DeepSeek:
                - api_key: str (required)
                - model: str
                - base_url: str | None
                - max_tokens, temperature, timeout_ms
            For Ollama:
                - model: str (default: 'codellama')
                - base_url: str (default: 'http://localhost:11434')

    Returns:
        Initialized LLM provider instance

    Raises:
        UnsupportedProviderError: If provider type has no implementation
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "deepseek",
        ...     api_key="sk-...",
        ...     model="deepseek-chat"
        ... )
    """
    provider_lower = provider.lower()
    if provider_lower == "claude":
        provider_lower = "anthropic"

    provider_cls = _PROVIDERS.get(provider_lower)
    if provider_cls is None:
        raise UnsupportedProviderError(provider)

    if provider_cls is not OllamaProvider and not config.get("api_key"):
        raise TypeError(f"{provider_cls.__name__} requires 'api_key' in config")

    return provider_cls(**config)


def supported_providers() -> list[str]:
    """Provider names that have a client implementation."""
    return list(_PROVIDERS)
