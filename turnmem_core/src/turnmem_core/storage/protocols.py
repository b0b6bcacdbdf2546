from typing import Any, Protocol


class MemoryBackend(Protocol):
    """Protocol for append-only conversation entry storage.

    The backend holds an ordered log of raw entries. It may contain data
    written by other components; the memory adapter only reads entries tagged
    with its own key. Each ``append_entry`` call must be atomic.
    """

    async def load_entries(self) -> list[Any]:
        """Return all stored entries, oldest first."""
        ...

    async def append_entry(self, raw: Any) -> None:
        """Append one entry to the end of the log."""
        ...


class WindowedBackend(MemoryBackend, Protocol):
    """A backend that also exposes a sliding-window size setting."""

    window: int | None
