from turnmem_core.builder import TurnBuilder, build_turn_messages
from turnmem_core.config import TurnMemConfig
from turnmem_core.entries import DeltaRecord, decode_payload, upgrade_legacy_messages
from turnmem_core.errors import MissingInputError, MissingModelError, OperationError
from turnmem_core.logs import RunLogger
from turnmem_core.memory import ConversationMemory, LoadStats
from turnmem_core.messages import (
    ContentPart,
    Message,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    validate_message,
    validate_messages,
)
from turnmem_core.providers import (
    LanguageModel,
    OpenAIChatModel,
    OpenAIProviderConfig,
    create_model,
)
from turnmem_core.results import (
    GenerationResult,
    GenerationStep,
    ToolCallRecord,
    ToolResultRecord,
)
from turnmem_core.settings import GenerationSettings
from turnmem_core.storage import (
    InMemoryBackend,
    KuzuEntryStore,
    MemoryBackend,
    WindowedBackend,
)
from turnmem_core.tools import FunctionTool, Tool, ToolRegistry
from turnmem_core.turnmem import TurnMem, TurnOutput
from turnmem_core.windowing import apply_window, drop_leading_orphans

__all__ = [
    # Main class
    "TurnMem",
    "TurnOutput",
    # Config
    "TurnMemConfig",
    "GenerationSettings",
    # Messages
    "Message",
    "ContentPart",
    "TextPart",
    "ToolCallPart",
    "ToolResultPart",
    "validate_message",
    "validate_messages",
    # Memory
    "ConversationMemory",
    "LoadStats",
    "DeltaRecord",
    "decode_payload",
    "upgrade_legacy_messages",
    "apply_window",
    "drop_leading_orphans",
    # Turn building
    "TurnBuilder",
    "build_turn_messages",
    "GenerationResult",
    "GenerationStep",
    "ToolCallRecord",
    "ToolResultRecord",
    # Storage
    "MemoryBackend",
    "WindowedBackend",
    "InMemoryBackend",
    "KuzuEntryStore",
    # Models and tools
    "LanguageModel",
    "OpenAIChatModel",
    "OpenAIProviderConfig",
    "create_model",
    "Tool",
    "FunctionTool",
    "ToolRegistry",
    # Errors and logging
    "OperationError",
    "MissingModelError",
    "MissingInputError",
    "RunLogger",
]
