from ..errors import ParleyError


class ConfigError(ParleyError):
    """Base class for configuration failures."""


class ConfigPersistenceError(ConfigError):
    """The config file could not be written."""


class ProviderNotConfiguredError(ConfigError):
    """The named provider has no entry in the configuration."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider '{provider}' not configured")
