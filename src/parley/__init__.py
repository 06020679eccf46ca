"""
Parley: a terminal chat session engine for language model backends.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .config import AppConfig, ConfigStore, ProviderConfig, ProviderType
from .errors import ParleyError
from .llm import LLMProvider, create_llm_provider
from .session import Conversation, InputBuffer, SessionContext, StreamingCoordinator, dispatch

__all__ = [
    "AppConfig",
    "ConfigStore",
    "Conversation",
    "InputBuffer",
    "LLMProvider",
    "ParleyError",
    "ProviderConfig",
    "ProviderType",
    "SessionContext",
    "StreamingCoordinator",
    "create_llm_provider",
    "dispatch",
]
