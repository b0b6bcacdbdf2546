from turnmem_core.providers.factory import create_model
from turnmem_core.providers.openai import OpenAIChatModel, OpenAIProviderConfig
from turnmem_core.providers.protocol import LanguageModel

__all__ = [
    "LanguageModel",
    "OpenAIChatModel",
    "OpenAIProviderConfig",
    "create_model",
]
