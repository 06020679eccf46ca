from .anthropic import AnthropicProvider
from .deepseek import DeepSeekProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider

__all__ = ["AnthropicProvider", "DeepSeekProvider", "OllamaProvider", "OpenAIProvider"]
