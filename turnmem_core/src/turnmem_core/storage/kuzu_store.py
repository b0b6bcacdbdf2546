"""Kùzu embedded database implementation of MemoryBackend."""

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import kuzu

from turnmem_core.entries import DeltaRecord, record_key, record_payload

logger = logging.getLogger(__name__)


def _result_to_dicts(result: kuzu.QueryResult) -> list[dict[str, Any]]:
    """Convert a Kùzu QueryResult to a list of dicts keyed by column name."""
    columns = result.get_column_names()
    rows = []
    while result.has_next():
        values = result.get_next()
        rows.append(dict(zip(columns, values)))
    return rows


def _single(result: kuzu.QueryResult) -> dict[str, Any] | None:
    """Get a single result row as a dict, or None."""
    columns = result.get_column_names()
    if result.has_next():
        values = result.get_next()
        return dict(zip(columns, values))
    return None


class KuzuEntryStore:
    """Append-only conversation log stored in an embedded Kùzu database.

    Entries live in a ``MemoryEntry`` node table, one node per appended delta,
    ordered by a per-conversation sequence number. All operations are
    synchronous in Kùzu and wrapped with asyncio.to_thread().

    Args:
        db_path: Directory holding the database.
        conversation_id: Conversation whose log this store reads and writes.
        window: Optional sliding-window size exposed to the memory adapter.
    """

    def __init__(
        self,
        db_path: Path,
        conversation_id: str,
        window: int | None = None,
    ) -> None:
        self._db_path = db_path
        self._conversation_id = conversation_id
        self.window = window
        self._db: kuzu.Database | None = None
        self._conn: kuzu.Connection | None = None
        # Sequence assignment is read-then-write.
        self._append_lock = asyncio.Lock()

    async def __aenter__(self) -> "KuzuEntryStore":
        await self.connect()
        await self.initialize_schema()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()

    @property
    def conversation_id(self) -> str:
        return self._conversation_id

    async def connect(self) -> None:
        """Connect to the Kùzu database."""
        self._db_path.mkdir(parents=True, exist_ok=True)
        # Kùzu needs a non-existing subpath or existing DB directory
        db_dir = self._db_path / "kuzu_db"

        def _connect() -> tuple[kuzu.Database, kuzu.Connection]:
            db = kuzu.Database(str(db_dir))
            conn = kuzu.Connection(db)
            return db, conn

        self._db, self._conn = await asyncio.to_thread(_connect)

    async def close(self) -> None:
        """Close the connection and release the database lock."""
        if self._conn is not None:
            self._conn.close()
        if self._db is not None:
            self._db.close()
        self._conn = None
        self._db = None

    async def initialize_schema(self) -> None:
        """Create the entry table."""
        if not self._conn:
            raise RuntimeError("Not connected")

        def _init_schema(conn: kuzu.Connection) -> None:
            conn.execute("""
                CREATE NODE TABLE IF NOT EXISTS MemoryEntry(
                    id STRING,
                    conversation_id STRING,
                    seq INT64,
                    memory_key STRING,
                    payload STRING,
                    created_at STRING,
                    PRIMARY KEY(id)
                )
            """)

        await asyncio.to_thread(_init_schema, self._conn)

    async def load_entries(self) -> list[dict[str, Any]]:
        """Return the conversation's entries as ``{key, payload}`` dicts, oldest first."""
        if not self._conn:
            raise RuntimeError("Not connected")

        def _load(conn: kuzu.Connection) -> list[dict[str, Any]]:
            result = conn.execute(
                "MATCH (e:MemoryEntry) WHERE e.conversation_id = $cid "
                "RETURN e.memory_key AS key, e.payload AS payload "
                "ORDER BY e.seq ASC",
                {"cid": self._conversation_id},
            )
            return _result_to_dicts(result)

        rows = await asyncio.to_thread(_load, self._conn)
        logger.debug(
            "load_entries conversation_id=%s results=%d", self._conversation_id, len(rows)
        )
        return rows

    async def append_entry(self, raw: Any) -> None:
        """Append one delta record.

        Raises:
            TypeError: If ``raw`` is not a delta record.
        """
        if not self._conn:
            raise RuntimeError("Not connected")

        key = record_key(raw)
        payload = record_payload(raw) if key is not None else None
        if key is None or not isinstance(payload, str):
            raise TypeError(f"Unsupported entry type: {type(raw)}")
        record = DeltaRecord(key=key, payload=payload)

        def _append(conn: kuzu.Connection) -> int:
            last = _single(
                conn.execute(
                    "MATCH (e:MemoryEntry) WHERE e.conversation_id = $cid "
                    "RETURN max(e.seq) AS seq",
                    {"cid": self._conversation_id},
                )
            )
            seq = 0 if last is None or last["seq"] is None else last["seq"] + 1
            conn.execute(
                """
                CREATE (e:MemoryEntry {
                    id: $id,
                    conversation_id: $cid,
                    seq: $seq,
                    memory_key: $key,
                    payload: $payload,
                    created_at: $created_at
                })
                """,
                {
                    "id": str(uuid4()),
                    "cid": self._conversation_id,
                    "seq": seq,
                    "key": record.key,
                    "payload": record.payload,
                    "created_at": datetime.now(UTC).isoformat(),
                },
            )
            return seq

        async with self._append_lock:
            seq = await asyncio.to_thread(_append, self._conn)
        logger.debug("append_entry conversation_id=%s seq=%d", self._conversation_id, seq)

    async def count_entries(self) -> int:
        """Count stored entries for the conversation."""
        if not self._conn:
            raise RuntimeError("Not connected")

        def _count(conn: kuzu.Connection) -> int:
            row = _single(
                conn.execute(
                    "MATCH (e:MemoryEntry) WHERE e.conversation_id = $cid "
                    "RETURN count(e) AS n",
                    {"cid": self._conversation_id},
                )
            )
            return row["n"] if row else 0

        return await asyncio.to_thread(_count, self._conn)
