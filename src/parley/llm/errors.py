"""Error types raised by the LLM layer.

Callers above this module only ever see these exceptions; SDK and
network failures are wrapped in ProviderTransportError at the provider
boundary so the session never needs to import openai/anthropic/httpx.
"""

from ..errors import ParleyError


class LLMError(ParleyError):
    """Base class for provider failures."""


class MissingApiKeyError(LLMError):
    """No API key in the config file or the environment."""

    def __init__(self, provider: str, env_var: str | None = None):
        self.provider = provider
        self.env_var = env_var
        hint = f"set {env_var} or use /apikey" if env_var else "use /apikey"
        super().__init__(f"No API key for {provider} ({hint})")


class UnsupportedProviderError(LLMError):
    """The configured provider has no client implementation."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider '{provider}' is not supported")


class ProviderTransportError(LLMError):
    """Network failure, non-2xx response or malformed payload."""


def describe_error(exc: BaseException) -> str:
    """Short, single-line reason suitable for a system notice."""
    if isinstance(exc, LLMError):
        return str(exc)
    text = str(exc).strip().splitlines()
    reason = text[0] if text else ""
    name = type(exc).__name__
    if not reason:
        return name
    if len(reason) > 200:
        reason = reason[:197] + "..."
    return f"{name}: {reason}"
