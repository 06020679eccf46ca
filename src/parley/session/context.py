"""Session-wide state threaded through the dispatcher, coordinator and renderer."""

from collections.abc import Callable
from dataclasses import dataclass

from ..config import ConfigStore
from ..llm import LLMProvider

ProviderFactory = Callable[[], LLMProvider]


@dataclass(frozen=True)
class SessionStatus:
    """What the status bar shows."""

    provider: str
    model: str
    total_tokens: int


def estimate_tokens(text_in: str, text_out: str) -> int:
    """Rough token count: characters in and out over four."""
    return (len(text_in) + len(text_out)) // 4


@dataclass
class SessionContext:
    """Everything a session needs besides its conversation and input line.

    Attributes:
        store: Configuration store (default provider, keys, persistence)
        provider_factory: Builds the provider for one request from the
            current configuration; raises MissingApiKeyError or
            UnsupportedProviderError when it cannot
        total_tokens: Running token estimate for the session
    """

    store: ConfigStore
    provider_factory: ProviderFactory
    total_tokens: int = 0

    def status(self) -> SessionStatus:
        return SessionStatus(
            provider=self.store.default_provider.value,
            model=self.store.default_model(),
            total_tokens=self.total_tokens,
        )

    def add_tokens(self, text_in: str, text_out: str) -> None:
        self.total_tokens += estimate_tokens(text_in, text_out)
