"""LangChain chat-history backend.

Stores conversation deltas inside any LangChain ``BaseChatMessageHistory``
(Redis, Postgres, in-memory...). Each delta becomes one ``AIMessage`` whose
content is the JSON payload and whose ``additional_kwargs`` carry the memory
key, so the entries can share the history with ordinary chat messages.
"""

from typing import TYPE_CHECKING, Any

from turnmem_core.entries import DeltaRecord, record_key, record_payload

if TYPE_CHECKING:
    from langchain_core.chat_history import BaseChatMessageHistory
    from langchain_core.messages import BaseMessage

MEMORY_KEY_FIELD = "memory_key"


class LangChainHistoryBackend:
    """MemoryBackend on top of a LangChain chat message history.

    Usage:
        ```python
        from langchain_core.chat_history import InMemoryChatMessageHistory
        from turnmem_core import ConversationMemory
        from turnmem_core.adapters.langchain import LangChainHistoryBackend

        backend = LangChainHistoryBackend(InMemoryChatMessageHistory())
        memory = ConversationMemory(backend)
        ```

    Args:
        history: The LangChain history to store entries in.
        window: Optional sliding-window size exposed to the memory adapter.
    """

    def __init__(self, history: "BaseChatMessageHistory", window: int | None = None) -> None:
        self._history = history
        self.window = window

    async def load_entries(self) -> list[Any]:
        """Return history messages, with tagged ones unwrapped to ``{key, payload}``."""
        messages = await self._history.aget_messages()
        return [self.convert_single(message) for message in messages]

    async def append_entry(self, raw: Any) -> None:
        """Append a delta record as a tagged AIMessage.

        Raises:
            TypeError: If ``raw`` is not a delta record.
        """
        from langchain_core.messages import AIMessage

        key = record_key(raw)
        payload = record_payload(raw) if key is not None else None
        if key is None or not isinstance(payload, str):
            raise TypeError(f"Unsupported entry type: {type(raw)}")
        record = DeltaRecord(key=key, payload=payload)

        await self._history.aadd_messages(
            [AIMessage(content=record.payload, additional_kwargs={MEMORY_KEY_FIELD: record.key})]
        )

    def convert_single(self, message: "BaseMessage") -> Any:
        """Unwrap a tagged message; pass any other message through unchanged."""
        key = message.additional_kwargs.get(MEMORY_KEY_FIELD)
        if isinstance(key, str) and isinstance(message.content, str):
            return {"key": key, "payload": message.content}
        return message
