"""Configuration module for parley.

Provides the provider entries, the default provider choice and the
credential lookup, persisted as JSON in the user's config directory.
"""

from .errors import ConfigError, ConfigPersistenceError, ProviderNotConfiguredError
from .models import (
    ENV_API_KEYS,
    KEYLESS_PROVIDERS,
    AppConfig,
    ProviderConfig,
    ProviderType,
    default_providers,
)
from .store import ConfigStore, default_config_path, default_data_path, mask_key

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigPersistenceError",
    "ConfigStore",
    "ENV_API_KEYS",
    "KEYLESS_PROVIDERS",
    "ProviderConfig",
    "ProviderNotConfiguredError",
    "ProviderType",
    "default_config_path",
    "default_data_path",
    "default_providers",
    "mask_key",
]
