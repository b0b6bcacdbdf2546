from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from turnmem_core.settings import GenerationSettings

DEFAULT_SYSTEM_MESSAGE = (
    "You are a helpful AI assistant. Use the available tools when necessary "
    "to help the user accomplish their goals."
)


class TurnMemConfig(BaseSettings):
    """Configuration for TurnMem.

    Settings can be provided via environment variables with TURNMEM_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="TURNMEM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Memory adapter
    memory_key: str = "chat_history_oai"
    max_messages: int | None = Field(default=None, ge=1)

    # Backend store
    store: Literal["memory", "kuzu"] = "memory"

    # Home directory for storage
    # Default: ~/.turnmem
    home: Path | None = None

    # Language model (model is required to run a batch)
    provider: Literal["openai"] = "openai"
    model: str | None = None
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    generation: GenerationSettings = Field(default_factory=GenerationSettings)

    # Agent loop
    max_steps: int = Field(default=5, ge=1, le=20)
    system_message: str | None = DEFAULT_SYSTEM_MESSAGE
    verbose: bool = False
    continue_on_fail: bool = False

    def get_home(self) -> Path:
        """Get the home directory for storage."""
        return self.home or Path.home() / ".turnmem"

    def get_store_path(self) -> Path:
        """Get the Kùzu store path (only used when store='kuzu')."""
        return self.get_home() / "memory"
