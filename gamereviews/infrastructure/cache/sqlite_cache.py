"""SQLite implementation of the RecordCache interface.

Records are stored as JSON text in a single `igdb_cache` table, one row per
stored record. No uniqueness constraint is enforced: re-fetching a record
appends a new row and reads always return the most recently inserted one.
Blocking sqlite3 calls run in a worker thread so they never stall the event
loop.
"""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from gamereviews.domain.errors import CacheStoreError
from gamereviews.domain.interfaces.cache import RecordCache
from gamereviews.domain.models.common import RecordId, ResourceKind
from gamereviews.domain.models.records import Record
from gamereviews.infrastructure.cache.serialization import deserialize_record, serialize_record

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS igdb_cache (
    igdb_id INTEGER NOT NULL,
    endpoint TEXT NOT NULL,
    value TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_igdb_cache_endpoint_id ON igdb_cache(endpoint, igdb_id);
"""

# Stays well below SQLITE_MAX_VARIABLE_NUMBER on old builds (999)
MAX_IDS_PER_QUERY = 500


class SqliteRecordCache(RecordCache):
    """Persistent record cache backed by a local SQLite file."""

    def __init__(self, path: Union[str, Path]):
        """Binds the cache to a database file without opening it.

        The file and the `igdb_cache` table are created on the first cache
        operation, so constructing a cache never touches the disk. Open or
        schema failures surface from that operation as CacheStoreError.

        Args:
            path: Path to the SQLite database file. It may be the review
                database itself; only the `igdb_cache` table is touched.
        """
        self._path = Path(path)
        self._schema_ready = False
        logger.info(f"SqliteRecordCache configured at {self._path}")

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path)
        if not self._schema_ready:
            try:
                conn.executescript(_SCHEMA)
                conn.commit()
            except sqlite3.Error:
                conn.close()
                raise
            self._schema_ready = True
            logger.debug(f"cache table ready in {self._path}")
        return conn

    # --- Blocking helpers (run via asyncio.to_thread) ---

    def _select_one(self, record_id: RecordId, kind: ResourceKind) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT value FROM igdb_cache WHERE igdb_id = ? AND endpoint = ? "
                "ORDER BY rowid DESC LIMIT 1",
                (record_id, kind),
            ).fetchone()
        return row[0] if row else None

    def _select_many(self, kind: ResourceKind, ids: List[RecordId]) -> Dict[RecordId, str]:
        found: Dict[RecordId, str] = {}
        with closing(self._connect()) as conn:
            for start in range(0, len(ids), MAX_IDS_PER_QUERY):
                chunk = ids[start:start + MAX_IDS_PER_QUERY]
                placeholders = ",".join("?" for _ in chunk)
                rows = conn.execute(
                    f"SELECT igdb_id, value FROM igdb_cache "
                    f"WHERE endpoint = ? AND igdb_id IN ({placeholders}) ORDER BY rowid",
                    (kind, *chunk),
                )
                # Ascending rowid: later duplicates overwrite earlier ones
                for igdb_id, value in rows:
                    found[RecordId(igdb_id)] = value
        return found

    def _insert_many(self, kind: ResourceKind, rows: List[Tuple[RecordId, str]]) -> None:
        with closing(self._connect()) as conn:
            # Commits on success, rolls back the whole batch on failure
            with conn:
                conn.executemany(
                    "INSERT INTO igdb_cache (igdb_id, endpoint, value) VALUES (?, ?, ?)",
                    [(record_id, kind, value) for record_id, value in rows],
                )

    def _count(self, kind: ResourceKind) -> int:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT COUNT(DISTINCT igdb_id) FROM igdb_cache WHERE endpoint = ?", (kind,)
            ).fetchone()
        return int(row[0])

    # --- RecordCache Interface Implementation ---

    async def get(self, record_id: RecordId, kind: ResourceKind) -> Optional[Record]:
        try:
            value = await asyncio.to_thread(self._select_one, record_id, kind)
        except sqlite3.Error as e:
            raise CacheStoreError(f"Failed to read ({kind}, {record_id}) from cache: {e}") from e
        if value is None:
            logger.debug(f"cache miss for ({kind}, {record_id})")
            return None
        return deserialize_record(kind, value)

    async def get_many(self, kind: ResourceKind, ids: Sequence[RecordId]) -> Dict[RecordId, Record]:
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return {}
        try:
            values = await asyncio.to_thread(self._select_many, kind, unique_ids)
        except sqlite3.Error as e:
            raise CacheStoreError(f"Failed to read {len(unique_ids)} '{kind}' entries from cache: {e}") from e
        logger.debug(f"cache lookup for '{kind}': {len(values)} hit(s), {len(unique_ids) - len(values)} miss(es)")
        return {record_id: deserialize_record(kind, value) for record_id, value in values.items()}

    async def put(self, record_id: RecordId, kind: ResourceKind, record: Record) -> None:
        await self.put_many(kind, [(record_id, record)])

    async def put_many(self, kind: ResourceKind, entries: Sequence[Tuple[RecordId, Record]]) -> None:
        if not entries:
            return
        # Serialize everything first so a bad record fails the batch before any write
        rows = [(record_id, serialize_record(record)) for record_id, record in entries]
        try:
            await asyncio.to_thread(self._insert_many, kind, rows)
        except sqlite3.Error as e:
            raise CacheStoreError(f"Failed to write {len(rows)} '{kind}' entries to cache: {e}") from e
        logger.debug(f"set cache for {len(rows)} '{kind}' entries")

    async def count(self, kind: ResourceKind) -> int:
        try:
            return await asyncio.to_thread(self._count, kind)
        except sqlite3.Error as e:
            raise CacheStoreError(f"Failed to count '{kind}' cache entries: {e}") from e
