"""Local Ollama provider.

Ollama serves an OpenAI-compatible API under ``/v1``; no key is needed,
but the OpenAI SDK insists on one so a placeholder is sent.
"""

from typing import Any

from .openai import OpenAIProvider

OLLAMA_PLACEHOLDER_KEY = "ollama"


def _compat_base_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    return base if base.endswith("/v1") else f"{base}/v1"


class OllamaProvider(OpenAIProvider):
    """Ollama provider talking to a local server."""

    name = "ollama"

    def __init__(
        self,
        model: str = "codellama",
        base_url: str = "http://localhost:11434",
        api_key: str | None = None,
        **kwargs: Any
    ):
        super().__init__(
            api_key=api_key or OLLAMA_PLACEHOLDER_KEY,
            model=model,
            base_url=_compat_base_url(base_url),
            **kwargs,
        )
