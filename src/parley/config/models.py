"""Data models for the configuration layer."""

from enum import Enum

from pydantic import BaseModel, Field


class ProviderType(str, Enum):
    """Providers a config entry can name."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"
    CUSTOM = "custom"

    @classmethod
    def from_string(cls, value: str) -> "ProviderType | None":
        """Look up a provider by name; None when unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Providers whose credentials may come from the environment
ENV_API_KEYS: dict[ProviderType, str] = {
    ProviderType.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderType.OPENAI: "OPENAI_API_KEY",
    ProviderType.DEEPSEEK: "DEEPSEEK_API_KEY",
}

# Providers that run locally and need no key at all
KEYLESS_PROVIDERS = {ProviderType.OLLAMA}


class ProviderConfig(BaseModel):
    """Configuration for a single provider."""

    provider_type: ProviderType
    base_url: str = Field(description="API base URL")
    model: str = Field(description="Model used for chat requests")
    api_key: str | None = Field(
        default=None,
        description="Key set by the user; environment keys are never stored here"
    )
    max_tokens: int = Field(default=8192, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_ms: int = Field(default=60000, ge=1)
    streaming: bool = Field(
        default=True,
        description="Stream replies when the provider supports it"
    )


class AppConfig(BaseModel):
    """Application configuration."""

    default_provider: ProviderType = ProviderType.ANTHROPIC
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    theme: str = "dark"


def default_providers() -> dict[str, ProviderConfig]:
    """Built-in provider entries, overridden by the config file."""
    return {
        "anthropic": ProviderConfig(
            provider_type=ProviderType.ANTHROPIC,
            base_url="https://api.anthropic.com",
            model="claude-sonnet-4-20250514",
        ),
        "openai": ProviderConfig(
            provider_type=ProviderType.OPENAI,
            base_url="https://api.openai.com/v1",
            model="gpt-4o",
        ),
        "deepseek": ProviderConfig(
            provider_type=ProviderType.DEEPSEEK,
            base_url="https://api.deepseek.com/v1",
            model="deepseek-chat",
        ),
        "ollama": ProviderConfig(
            provider_type=ProviderType.OLLAMA,
            base_url="http://localhost:11434",
            model="codellama",
            max_tokens=4096,
        ),
    }
