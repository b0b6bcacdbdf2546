"""Conversation memory adapter.

Stores each turn's messages as one immutable backend entry and rebuilds the
conversation on read:

    ```python
    from turnmem_core import ConversationMemory, InMemoryBackend, Message

    memory = ConversationMemory(InMemoryBackend(), max_messages=20)
    await memory.append([
        Message(role="user", content="hi"),
        Message(role="assistant", content="hello"),
    ])
    history = await memory.load()
    ```
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from turnmem_core.entries import (
    DeltaRecord,
    decode_payload,
    record_key,
    record_payload,
    upgrade_legacy_messages,
)
from turnmem_core.messages import Message, validate_messages
from turnmem_core.settings import resolve_window
from turnmem_core.storage.protocols import MemoryBackend
from turnmem_core.windowing import apply_window, drop_leading_orphans

if TYPE_CHECKING:
    from turnmem_core.config import TurnMemConfig

DEFAULT_MEMORY_KEY = "chat_history_oai"


class LoadStats(BaseModel):
    """Counters describing the most recent ``load()``.

    Attributes:
        entries: Tagged entries found in the backend.
        skipped_entries: Tagged entries whose payload could not be decoded.
        dropped_messages: Elements that failed message validation.
        trimmed_messages: Messages cut by the window.
        orphans_dropped: Messages removed from the front after windowing.
        read_failed: Whether the backend read raised.
    """

    entries: int = 0
    skipped_entries: int = 0
    dropped_messages: int = 0
    trimmed_messages: int = 0
    orphans_dropped: int = 0
    read_failed: bool = False


class ConversationMemory:
    """Tool-call-aware conversation memory on top of an append-only backend.

    Args:
        backend: Entry storage.
        key: Memory key tagging the entries this adapter writes and reads.
        max_messages: Optional window; only the most recent messages are
            returned by ``load()``.
        logger: Logger for warnings and detail messages. Defaults to the
            module logger.
    """

    def __init__(
        self,
        backend: MemoryBackend,
        key: str = DEFAULT_MEMORY_KEY,
        max_messages: int | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self._backend = backend
        self._key = key
        self._max_messages = max_messages
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self.last_load = LoadStats()

    @classmethod
    def from_config(
        cls,
        backend: MemoryBackend,
        config: "TurnMemConfig",
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> "ConversationMemory":
        """Create an adapter, resolving the window from config then backend."""
        window = resolve_window(
            [
                ("config", lambda _key: config.max_messages),
                ("backend", lambda key: getattr(backend, key, None)),
            ]
        )
        return cls(backend, key=config.memory_key, max_messages=window, logger=logger)

    @property
    def key(self) -> str:
        return self._key

    @property
    def max_messages(self) -> int | None:
        return self._max_messages

    async def load(self) -> list[Message]:
        """Rebuild the conversation context from all stored deltas.

        Never raises for storage or data problems: a failing backend yields an
        empty history, undecodable entries and invalid messages are skipped.

        Returns:
            Messages oldest first, windowed and starting with a complete exchange.
        """
        stats = LoadStats()
        self.last_load = stats

        try:
            raw_entries = await self._backend.load_entries()
        except Exception:
            self._logger.warning(
                "Failed to load conversation history, starting fresh", exc_info=True
            )
            stats.read_failed = True
            return []

        combined: list[Message] = []
        for index, raw in enumerate(raw_entries):
            if record_key(raw) != self._key:
                continue
            stats.entries += 1

            items = decode_payload(record_payload(raw))
            if items is None:
                stats.skipped_entries += 1
                self._logger.warning("Skipping malformed memory entry %d", index)
                continue

            valid, dropped = validate_messages(upgrade_legacy_messages(items))
            if dropped:
                stats.dropped_messages += dropped
                self._logger.warning(
                    "Dropped %d invalid message(s) from memory entry %d", dropped, index
                )
            combined.extend(valid)

        windowed = apply_window(combined, self._max_messages)
        stats.trimmed_messages = len(combined) - len(windowed)

        messages = drop_leading_orphans(windowed)
        stats.orphans_dropped = len(windowed) - len(messages)
        if stats.orphans_dropped:
            self._logger.debug(
                "Dropped %d orphaned message(s) at the window edge", stats.orphans_dropped
            )

        self._logger.debug(
            "load key=%s entries=%d messages=%d", self._key, stats.entries, len(messages)
        )
        return messages

    async def append(self, delta: list[Message | dict[str, Any]]) -> None:
        """Persist one turn's messages as a single new backend entry.

        Invalid messages are dropped; nothing is written when the delta is
        empty or entirely invalid.

        Raises:
            Exception: Whatever the backend raises on write, after logging it.
        """
        if not delta:
            return

        valid, dropped = validate_messages(delta)
        wire: list[dict[str, Any]] = []
        for message in valid:
            try:
                wire.append(message.to_wire())
            except ValueError:
                # Tool results holding values with no JSON form
                dropped += 1
        if dropped:
            self._logger.warning("Dropped %d invalid message(s) before saving", dropped)
        if not wire:
            self._logger.warning("Nothing to save: all %d message(s) were invalid", dropped)
            return

        payload = json.dumps(wire, ensure_ascii=False)
        record = DeltaRecord(key=self._key, payload=payload)
        try:
            await self._backend.append_entry(record.model_dump())
        except Exception:
            self._logger.error("Failed to save conversation to memory", exc_info=True)
            raise

        self._logger.debug("append key=%s messages=%d", self._key, len(wire))
