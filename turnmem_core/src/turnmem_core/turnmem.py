"""TurnMem - tool-call-aware conversation memory for chat agents.

Usage:
    ```python
    from turnmem_core import TurnMem, TurnMemConfig

    config = TurnMemConfig(model="gpt-4o-mini", max_messages=30)
    async with TurnMem(config, conversation_id="chat-42", tools=[search]) as tm:
        outputs = await tm.run(["What's the weather in Paris?"])
        print(outputs[0].output)
    ```

Each input item runs one read → generate → append cycle: the stored history
is loaded, the user message is appended, the model answers (calling tools as
needed), and the turn's messages are saved back as a single new entry.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from turnmem_core.builder import TurnBuilder
from turnmem_core.config import TurnMemConfig
from turnmem_core.errors import MissingInputError, MissingModelError
from turnmem_core.logs import RunLogger
from turnmem_core.memory import ConversationMemory
from turnmem_core.messages import Message
from turnmem_core.providers.factory import create_model
from turnmem_core.providers.protocol import LanguageModel
from turnmem_core.results import GenerationStep
from turnmem_core.storage.kuzu_store import KuzuEntryStore
from turnmem_core.storage.memory import InMemoryBackend
from turnmem_core.storage.protocols import MemoryBackend
from turnmem_core.tools import ToolRegistry

logger = logging.getLogger(__name__)

INPUT_FIELDS = ("chatInput", "text")


class TurnOutput(BaseModel):
    """Outcome of one input item.

    Attributes:
        output: Final assistant text.
        steps: Per-round generation steps.
        total_steps: Number of rounds.
        memory_error: Set when the turn could not be saved to memory.
        error: Set instead of the other fields when the item failed and the
            batch continues on failure.
    """

    output: str = ""
    steps: list[GenerationStep] = []
    total_steps: int = 0
    memory_error: str | None = None
    error: str | None = None


def get_input_text(item: Any) -> str | None:
    """Extract the user's input from a batch item.

    Items are plain strings, or mappings carrying ``chatInput`` (from a chat
    trigger) or ``text``.
    """
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        for field in INPUT_FIELDS:
            value = item.get(field)
            if isinstance(value, str) and value:
                return value
    return None


class TurnMem:
    """Runs chat turns against a language model with persistent memory.

    Args:
        config: Configuration settings. Uses defaults if not provided.
        conversation_id: Conversation whose memory is read and written.
        backend: Custom memory backend. Built from ``config.store`` if not
            provided.
        model: Custom language model. Built from ``config`` if not provided;
            a batch fails with MissingModelError when neither is available.
        tools: Tools, lists of tools or toolkits the model may call.
    """

    def __init__(
        self,
        config: TurnMemConfig | None = None,
        *,
        conversation_id: str = "default",
        backend: MemoryBackend | None = None,
        model: LanguageModel | None = None,
        tools: Any = None,
    ) -> None:
        self._config = config or TurnMemConfig()
        self._conversation_id = conversation_id
        self._owns_backend = backend is None

        if backend is not None:
            self._backend = backend
        elif self._config.store == "kuzu":
            self._backend = KuzuEntryStore(
                db_path=self._config.get_store_path(),
                conversation_id=conversation_id,
            )
        else:
            self._backend = InMemoryBackend()

        self._model = model
        self._tools = ToolRegistry(tools)
        self._memory = ConversationMemory.from_config(self._backend, self._config)

    async def __aenter__(self) -> "TurnMem":
        """Async context manager entry."""
        if self._owns_backend and isinstance(self._backend, KuzuEntryStore):
            await self._backend.connect()
            await self._backend.initialize_schema()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        """Async context manager exit - closes an owned store."""
        if self._owns_backend and isinstance(self._backend, KuzuEntryStore):
            await self._backend.close()

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    def _resolve_model(self) -> LanguageModel:
        if self._model is None:
            if not self._config.model:
                raise MissingModelError()
            self._model = create_model(self._config)
        return self._model

    async def run(self, items: list[Any]) -> list[TurnOutput]:
        """Run one batch of input items, in order.

        Args:
            items: Input items (strings or mappings with ``chatInput``/``text``).

        Returns:
            One TurnOutput per item.

        Raises:
            MissingModelError: If no language model is available.
            OperationError: If an item has no input and the batch does not
                continue on failure.
        """
        run_log = RunLogger(logger, verbose=self._config.verbose)
        model = self._resolve_model()
        memory = ConversationMemory.from_config(self._backend, self._config, logger=run_log)
        builder = TurnBuilder(logger=run_log)

        outputs: list[TurnOutput] = []
        for index, item in enumerate(items):
            try:
                outputs.append(await self._run_item(item, model, memory, builder, run_log))
            except Exception as exc:
                if not self._config.continue_on_fail:
                    raise
                run_log.warning("Item %d failed: %s", index, exc)
                outputs.append(TurnOutput(error=str(exc)))

        self._memory = memory
        return outputs

    async def run_one(self, text: str) -> TurnOutput:
        """Run a single input as its own batch."""
        outputs = await self.run([text])
        return outputs[0]

    async def _run_item(
        self,
        item: Any,
        model: LanguageModel,
        memory: ConversationMemory,
        builder: TurnBuilder,
        run_log: RunLogger,
    ) -> TurnOutput:
        user_input = get_input_text(item)
        if not user_input or not user_input.strip():
            raise MissingInputError()

        messages = await memory.load()
        run_log.detail("Loaded %d messages from conversation history", len(messages))

        system_message = self._config.system_message
        if system_message and (not messages or messages[0].role != "system"):
            messages.insert(0, Message(role="system", content=system_message))
        messages.append(Message(role="user", content=user_input))

        result = await model.generate(
            messages,
            tools=self._tools,
            max_steps=self._config.max_steps,
        )

        memory_error: str | None = None
        delta = builder.build(user_input, result)
        try:
            await memory.append(delta)
            run_log.detail("Saved %d messages (including new turn)", len(delta))
        except Exception as exc:
            memory_error = str(exc) or type(exc).__name__

        return TurnOutput(
            output=result.text,
            steps=result.steps,
            total_steps=len(result.steps),
            memory_error=memory_error,
        )
