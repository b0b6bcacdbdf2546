from turnmem_core.storage.kuzu_store import KuzuEntryStore
from turnmem_core.storage.memory import InMemoryBackend
from turnmem_core.storage.protocols import MemoryBackend, WindowedBackend

__all__ = [
    "InMemoryBackend",
    "KuzuEntryStore",
    "MemoryBackend",
    "WindowedBackend",
]
