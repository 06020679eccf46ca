"""Provider factory functions for the CLI.

Builds the LLM provider for one request from the current configuration.
Hides how a config entry and its credentials map onto provider
constructor arguments.
"""

import logging
from functools import partial

from ..config import ENV_API_KEYS, KEYLESS_PROVIDERS, ConfigStore, ProviderType
from ..llm import LLMProvider, MissingApiKeyError, UnsupportedProviderError, create_llm_provider
from ..session import ProviderFactory

logger = logging.getLogger(__name__)


def resolve_provider(store: ConfigStore) -> LLMProvider:
    """Create the LLM provider for the current default provider entry.

    Args:
        store: Configuration store

    Returns:
        A fresh provider instance; the caller closes it

    Raises:
        MissingApiKeyError: If the provider needs a key and neither the
            config file nor the environment has one
        UnsupportedProviderError: If the entry is missing or names a
            provider with no client implementation (``custom``)
    """
    name = store.default_provider.value
    cfg = store.get_default_provider()
    if cfg is None or cfg.provider_type is ProviderType.CUSTOM:
        raise UnsupportedProviderError(name)

    api_key = store.api_key_for(name)
    if api_key is None and cfg.provider_type not in KEYLESS_PROVIDERS:
        raise MissingApiKeyError(name, ENV_API_KEYS.get(cfg.provider_type))

    logger.debug("Creating %s provider for model %s", cfg.provider_type.value, cfg.model)
    return create_llm_provider(
        cfg.provider_type.value,
        api_key=api_key,
        model=cfg.model,
        base_url=cfg.base_url,
        max_tokens=cfg.max_tokens,
        temperature=cfg.temperature,
        timeout_ms=cfg.timeout_ms,
    )


def provider_factory(store: ConfigStore) -> ProviderFactory:
    """Bind ``resolve_provider`` to a store, re-reading it on every call."""
    return partial(resolve_provider, store)
