"""Pytest configuration and shared fixtures."""
import os
from typing import Any

import pytest

from parley.config import ENV_API_KEYS, ConfigStore
from parley.llm import ChatMessage, LLMProvider, LLMResponse, StreamingResponse
from parley.session import SessionContext


class FakeProvider(LLMProvider):
    """In-process provider that replays scripted chunks.

    Raises ``error`` after the chunks have been yielded (immediately when
    there are none), or from ``chat_completion``.
    """

    name = "fake"

    def __init__(self, chunks: list[str] | None = None, reply: str = "", error: Exception | None = None):
        self.chunks = list(chunks or [])
        self.reply = reply
        self.error = error
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model)

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        self.calls.append(list(messages))

        async def generate():
            for chunk in self.chunks:
                yield chunk
            if self.error is not None:
                raise self.error

        return StreamingResponse(generate())

    async def close(self) -> None:
        self.closed = True


class NonStreamingFakeProvider(FakeProvider):
    """Fake provider without streaming support."""

    supports_streaming = False


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real API keys out of every test."""
    for env_var in ENV_API_KEYS.values():
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def config_path(tmp_path):
    """Path of a config file inside the test's temporary directory."""
    return tmp_path / "config" / "config.json"


@pytest.fixture
def store(config_path):
    """Config store with built-in defaults, backed by a temporary file."""
    return ConfigStore(path=config_path)


@pytest.fixture
def make_context(store):
    """Build a SessionContext whose factory hands out the given provider."""
    def _make(provider: LLMProvider | Exception | None = None) -> SessionContext:
        def factory() -> LLMProvider:
            if isinstance(provider, Exception):
                raise provider
            return provider or FakeProvider(chunks=["ok"])
        return SessionContext(store=store, provider_factory=factory)
    return _make


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY"),
    }
