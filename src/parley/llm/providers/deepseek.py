from typing import Any

from .openai import OpenAIProvider


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek LLM provider using the OpenAI-compatible API.

    Models: 'deepseek-chat' (V3) and 'deepseek-reasoner'.
    """

    name = "deepseek"

    def __init__(
        self,
        api_key: str,
        model: str = "deepseek-chat",
        base_url: str = "https://api.deepseek.com/v1",
        **kwargs: Any
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, **kwargs)
