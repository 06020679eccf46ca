"""Model catalogue used by the setup wizard.

Anthropic and DeepSeek publish no model listing endpoint, so their lists
are fixed. OpenAI and Ollama are queried live and fall back to a short
static list on any failure.
"""

import logging

import httpx

from .models import ModelInfo

logger = logging.getLogger(__name__)

LIST_TIMEOUT_SECONDS = 5.0

ANTHROPIC_MODELS = [
    ModelInfo(id="claude-sonnet-4-20250514", name="Claude Sonnet 4 (Latest)"),
    ModelInfo(id="claude-opus-4-20250514", name="Claude Opus 4 (Most Capable)"),
    ModelInfo(id="claude-3-5-haiku-20241022", name="Claude Haiku 3.5 (Fast)"),
    ModelInfo(id="claude-3-5-sonnet-20241022", name="Claude 3.5 Sonnet"),
]

DEEPSEEK_MODELS = [
    ModelInfo(id="deepseek-chat", name="DeepSeek Chat (V3, Fast)"),
    ModelInfo(id="deepseek-reasoner", name="DeepSeek Reasoner (V3, Thinking)"),
]

OPENAI_FALLBACK_MODELS = [
    ModelInfo(id="gpt-4o", name="GPT-4o (Recommended)"),
    ModelInfo(id="gpt-4o-mini", name="GPT-4o Mini (Fast)"),
    ModelInfo(id="gpt-4-turbo", name="GPT-4 Turbo"),
]

OLLAMA_FALLBACK_MODELS = [
    ModelInfo(id="codellama", name="Code Llama (not installed)"),
    ModelInfo(id="llama3", name="Llama 3 (not installed)"),
    ModelInfo(id="mistral", name="Mistral (not installed)"),
]


def fetch_models(
    provider: str,
    base_url: str,
    api_key: str | None = None,
    client: httpx.Client | None = None,
) -> list[ModelInfo]:
    """List the models selectable for a provider.

    Args:
        provider: Provider name
        base_url: Provider base URL from the config
        api_key: Key for providers whose listing endpoint needs one
        client: Optional preconfigured httpx client (tests pass a mock transport)

    Returns:
        Non-empty list for known providers, empty list otherwise
    """
    if provider == "anthropic":
        return list(ANTHROPIC_MODELS)
    if provider == "deepseek":
        return list(DEEPSEEK_MODELS)
    if provider == "openai":
        if not api_key:
            return list(OPENAI_FALLBACK_MODELS)
        return _fetch_openai_models(base_url, api_key, client)
    if provider == "ollama":
        return _fetch_ollama_models(base_url, client)
    return []


def _get_json(url: str, headers: dict[str, str], client: httpx.Client | None) -> dict:
    if client is not None:
        response = client.get(url, headers=headers)
    else:
        with httpx.Client(timeout=LIST_TIMEOUT_SECONDS) as owned:
            response = owned.get(url, headers=headers)
    response.raise_for_status()
    return response.json()


def _fetch_openai_models(
    base_url: str,
    api_key: str,
    client: httpx.Client | None,
) -> list[ModelInfo]:
    url = f"{base_url.rstrip('/')}/models"
    try:
        payload = _get_json(url, {"Authorization": f"Bearer {api_key}"}, client)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Failed to list OpenAI models: %s", e)
        return list(OPENAI_FALLBACK_MODELS)

    models = [
        ModelInfo(id=item["id"], name=item["id"])
        for item in payload.get("data", [])
        if isinstance(item, dict) and str(item.get("id", "")).startswith("gpt-")
    ]
    return sorted(models, key=lambda m: m.id) or list(OPENAI_FALLBACK_MODELS)


def _fetch_ollama_models(base_url: str, client: httpx.Client | None) -> list[ModelInfo]:
    # Ollama answers {"models": [{"name": "codellama:latest", ...}]}
    url = f"{base_url.rstrip('/')}/api/tags"
    try:
        payload = _get_json(url, {}, client)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Failed to list Ollama models: %s", e)
        return list(OLLAMA_FALLBACK_MODELS)

    models = [
        ModelInfo(id=item["name"], name=item["name"])
        for item in payload.get("models", [])
        if isinstance(item, dict) and item.get("name")
    ]
    return models or list(OLLAMA_FALLBACK_MODELS)
