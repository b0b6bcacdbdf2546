from pathlib import Path
from typing import Any

import pytest

from turnmem_core.config import TurnMemConfig
from turnmem_core.memory import ConversationMemory
from turnmem_core.messages import Message
from turnmem_core.results import GenerationResult
from turnmem_core.storage.kuzu_store import KuzuEntryStore
from turnmem_core.storage.memory import InMemoryBackend
from turnmem_core.tools import ToolRegistry


class MockModel:
    """Mock language model returning scripted results."""

    def __init__(self, results: list[GenerationResult | dict[str, Any]] | None = None) -> None:
        self._results = list(results or [])
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: ToolRegistry | None = None,
        max_steps: int = 1,
    ) -> GenerationResult:
        """Record the call and return the next scripted result."""
        self.calls.append({"messages": list(messages), "tools": tools, "max_steps": max_steps})
        if self._results:
            result = self._results.pop(0)
        else:
            result = {"text": "ok", "steps": [{"text": "ok"}]}
        return GenerationResult.model_validate(result)


class FailingBackend:
    """Backend whose reads and/or writes raise."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True) -> None:
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.entries: list[Any] = []

    async def load_entries(self) -> list[Any]:
        if self.fail_reads:
            raise ConnectionError("backend unavailable")
        return list(self.entries)

    async def append_entry(self, raw: Any) -> None:
        if self.fail_writes:
            raise ConnectionError("backend unavailable")
        self.entries.append(raw)


def tool_call_message(call_id: str = "c1", name: str = "add", **args: Any) -> Message:
    """Assistant message requesting a single tool call."""
    return Message(
        role="assistant",
        content=[{"type": "tool-call", "toolCallId": call_id, "toolName": name, "args": args}],
    )


def tool_result_message(call_id: str = "c1", name: str = "add", result: Any = 3) -> Message:
    """Tool message answering a single tool call."""
    return Message(
        role="tool",
        content=[{"type": "tool-result", "toolCallId": call_id, "toolName": name, "result": result}],
    )


@pytest.fixture
def backend() -> InMemoryBackend:
    """Provide an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def memory(backend: InMemoryBackend) -> ConversationMemory:
    """Provide a memory adapter without a window."""
    return ConversationMemory(backend)


@pytest.fixture
def mock_model() -> MockModel:
    """Provide a mock model with default replies."""
    return MockModel()


@pytest.fixture
def tool_exchange() -> list[Message]:
    """A full turn with one tool round trip."""
    return [
        Message(role="user", content="what is 1 + 2?"),
        tool_call_message("c1", "add", a=1, b=2),
        tool_result_message("c1", "add", 3),
        Message(role="assistant", content="done"),
    ]


@pytest.fixture
def config(tmp_path: Path) -> TurnMemConfig:
    """Config isolated from the environment and the user's home."""
    return TurnMemConfig(home=tmp_path / ".turnmem", model=None, _env_file=None)


@pytest.fixture
async def kuzu_store(tmp_path: Path):
    """Connected KuzuEntryStore with a fresh database."""
    store = KuzuEntryStore(db_path=tmp_path / "memory", conversation_id="conv-1")
    await store.connect()
    await store.initialize_schema()
    yield store
    await store.close()
