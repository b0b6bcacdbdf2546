from turnmem_core.config import TurnMemConfig
from turnmem_core.errors import MissingModelError
from turnmem_core.providers.openai import OpenAIChatModel, OpenAIProviderConfig
from turnmem_core.providers.protocol import LanguageModel


def create_model(config: TurnMemConfig) -> LanguageModel:
    """Create the language model described by ``config``.

    Dispatches on the explicit ``provider`` descriptor.

    Raises:
        MissingModelError: If no model name is configured.
        ValueError: If the provider is not supported.
    """
    if not config.model:
        raise MissingModelError()

    if config.provider == "openai":
        return OpenAIChatModel(
            OpenAIProviderConfig(
                model=config.model,
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
                generation=config.generation,
            )
        )

    raise ValueError(f"Unsupported provider: {config.provider}")
