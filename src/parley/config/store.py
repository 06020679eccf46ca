"""JSON-backed configuration store.

Hides where the configuration lives on disk, how it is merged with the
built-in defaults, and where credentials come from (the file first, then
the provider's environment variable). Keys taken from the environment are
never written back.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigPersistenceError, ProviderNotConfiguredError
from .models import (
    ENV_API_KEYS,
    KEYLESS_PROVIDERS,
    AppConfig,
    ProviderConfig,
    ProviderType,
    default_providers,
)

logger = logging.getLogger(__name__)

MAX_CONFIG_BYTES = 1024 * 1024


def default_config_path() -> Path:
    """Per-user config file location."""
    return Path.home() / ".config" / "parley" / "config.json"


def default_data_path() -> Path:
    """Per-user data directory (log file lives here)."""
    return Path.home() / ".local" / "share" / "parley"


def mask_key(key: str) -> str:
    """Render a key for display without revealing it."""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


class ConfigStore:
    """Owns the in-memory AppConfig and its JSON file.

    Example:
        store = ConfigStore()
        loaded = store.load()
        store.switch_default_provider("openai")
        store.save()
    """

    def __init__(self, path: Path | None = None, config: AppConfig | None = None):
        self._path = path or default_config_path()
        self._config = config or AppConfig(providers=default_providers())

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def default_provider(self) -> ProviderType:
        return self._config.default_provider

    def provider_names(self) -> list[str]:
        """Names of the configured providers, in insertion order."""
        return list(self._config.providers)

    def get_provider(self, name: str) -> ProviderConfig | None:
        return self._config.providers.get(name)

    def get_default_provider(self) -> ProviderConfig | None:
        """Entry of the current default provider, if configured."""
        return self._config.providers.get(self._config.default_provider.value)

    def default_model(self) -> str:
        cfg = self.get_default_provider()
        return cfg.model if cfg else "unknown"

    def load(self) -> bool:
        """Merge the config file onto the defaults.

        Returns:
            True if a config file was read, False if it was missing or unreadable
        """
        try:
            raw = self._path.read_bytes()[:MAX_CONFIG_BYTES]
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to read config %s: %s", self._path, e)
            return False

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Ignoring malformed config %s: %s", self._path, e)
            return False
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not an object", self._path)
            return False

        default = ProviderType.from_string(str(data.get("default_provider", "")))
        if default is not None:
            self._config.default_provider = default

        providers = data.get("providers")
        if isinstance(providers, dict):
            for name, entry in providers.items():
                if isinstance(entry, dict):
                    self._merge_provider(name, entry)

        theme = data.get("theme")
        if isinstance(theme, str):
            self._config.theme = theme
        return True

    def _merge_provider(self, name: str, entry: dict[str, Any]) -> None:
        current = self._config.providers.get(name)
        if current is None:
            provider_type = ProviderType.from_string(str(entry.get("provider_type", name)))
            if provider_type is None:
                logger.warning("Ignoring config entry for unknown provider %r", name)
                return
            fields = {"provider_type": provider_type, **entry}
        else:
            fields = {**current.model_dump(), **entry}

        try:
            self._config.providers[name] = ProviderConfig.model_validate(fields)
        except ValidationError as e:
            logger.warning("Ignoring invalid config entry for %s: %s", name, e)

    def save(self) -> None:
        """Write the configuration as indented JSON.

        Raises:
            ConfigPersistenceError: If the directory or file cannot be written
        """
        providers: dict[str, dict[str, Any]] = {}
        for name, cfg in self._config.providers.items():
            entry: dict[str, Any] = {
                "provider_type": cfg.provider_type.value,
                "model": cfg.model,
                "base_url": cfg.base_url,
                "max_tokens": cfg.max_tokens,
                "temperature": cfg.temperature,
                "timeout_ms": cfg.timeout_ms,
                "streaming": cfg.streaming,
            }
            if cfg.api_key:
                entry["api_key"] = cfg.api_key
            providers[name] = entry

        document = {
            "default_provider": self._config.default_provider.value,
            "providers": providers,
            "theme": self._config.theme,
        }

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            # The file holds credentials
            os.chmod(self._path, 0o600)
        except OSError as e:
            raise ConfigPersistenceError(f"Failed to save config to {self._path}: {e}") from e

    def set_api_key(self, name: str, api_key: str) -> None:
        """Set the key for a configured provider.

        Raises:
            ProviderNotConfiguredError: If the provider has no entry
        """
        cfg = self._config.providers.get(name)
        if cfg is None:
            raise ProviderNotConfiguredError(name)
        cfg.api_key = api_key

    def set_default_api_key(self, api_key: str) -> None:
        self.set_api_key(self._config.default_provider.value, api_key)

    def set_model(self, name: str, model: str) -> None:
        cfg = self._config.providers.get(name)
        if cfg is None:
            raise ProviderNotConfiguredError(name)
        cfg.model = model

    def switch_default_provider(self, name: str) -> ProviderConfig:
        """Make a configured provider the default.

        Raises:
            ProviderNotConfiguredError: If the name is unknown or has no entry
        """
        provider_type = ProviderType.from_string(name)
        cfg = self._config.providers.get(name)
        if provider_type is None or cfg is None:
            raise ProviderNotConfiguredError(name)
        self._config.default_provider = provider_type
        return cfg

    def api_key_for(self, name: str) -> str | None:
        """Configured key, else the provider's environment variable."""
        cfg = self._config.providers.get(name)
        if cfg is not None and cfg.api_key:
            return cfg.api_key
        provider_type = ProviderType.from_string(name)
        env_var = ENV_API_KEYS.get(provider_type) if provider_type else None
        if env_var:
            return os.getenv(env_var) or None
        return None

    def api_key_source(self, name: str) -> str | None:
        """Where the active key comes from: 'config', the env var name, or None."""
        cfg = self._config.providers.get(name)
        if cfg is not None and cfg.api_key:
            return "config"
        provider_type = ProviderType.from_string(name)
        env_var = ENV_API_KEYS.get(provider_type) if provider_type else None
        if env_var and os.getenv(env_var):
            return env_var
        return None

    def has_credentials(self) -> bool:
        """Whether the default provider can be called without asking for a key."""
        provider_type = self._config.default_provider
        if provider_type in KEYLESS_PROVIDERS:
            return True
        return self.api_key_for(provider_type.value) is not None
