"""In-process list implementation of MemoryBackend."""

import copy
from typing import Any


class InMemoryBackend:
    """Keeps entries in a Python list.

    Entries are deep-copied on the way in and out so callers cannot mutate
    stored history.

    Args:
        entries: Optional initial log, oldest first.
        window: Optional sliding-window size exposed to the memory adapter.
    """

    def __init__(self, entries: list[Any] | None = None, window: int | None = None) -> None:
        self._entries: list[Any] = copy.deepcopy(entries) if entries else []
        self.window = window

    def __len__(self) -> int:
        return len(self._entries)

    async def load_entries(self) -> list[Any]:
        return copy.deepcopy(self._entries)

    async def append_entry(self, raw: Any) -> None:
        self._entries.append(copy.deepcopy(raw))
