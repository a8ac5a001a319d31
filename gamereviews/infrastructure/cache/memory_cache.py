"""In-memory implementations of the RecordCache interface.

`InMemoryRecordCache` stores the same JSON text as the SQLite cache, so
tests exercise the real serialization path. `NoOpRecordCache` stores nothing
and is used to debug the remote API without any caching.
"""

import asyncio
import logging
from typing import Dict, Optional, Sequence, Tuple

from gamereviews.domain.interfaces.cache import RecordCache
from gamereviews.domain.models.common import RecordId, ResourceKind
from gamereviews.domain.models.records import Record
from gamereviews.infrastructure.cache.serialization import deserialize_record, serialize_record

logger = logging.getLogger(__name__)


class InMemoryRecordCache(RecordCache):
    """Process-local record cache."""

    def __init__(self):
        self._entries: Dict[Tuple[ResourceKind, RecordId], str] = {}
        self._lock = asyncio.Lock()

    async def get(self, record_id: RecordId, kind: ResourceKind) -> Optional[Record]:
        async with self._lock:
            value = self._entries.get((kind, record_id))
        if value is None:
            logger.debug(f"cache miss for ({kind}, {record_id})")
            return None
        return deserialize_record(kind, value)

    async def get_many(self, kind: ResourceKind, ids: Sequence[RecordId]) -> Dict[RecordId, Record]:
        async with self._lock:
            values = {
                record_id: self._entries[(kind, record_id)]
                for record_id in ids
                if (kind, record_id) in self._entries
            }
        return {record_id: deserialize_record(kind, value) for record_id, value in values.items()}

    async def put(self, record_id: RecordId, kind: ResourceKind, record: Record) -> None:
        await self.put_many(kind, [(record_id, record)])

    async def put_many(self, kind: ResourceKind, entries: Sequence[Tuple[RecordId, Record]]) -> None:
        rows = [(record_id, serialize_record(record)) for record_id, record in entries]
        async with self._lock:
            for record_id, value in rows:
                self._entries[(kind, record_id)] = value
        logger.debug(f"set cache for {len(rows)} '{kind}' entries")

    async def count(self, kind: ResourceKind) -> int:
        async with self._lock:
            return sum(1 for entry_kind, _ in self._entries if entry_kind == kind)


class NoOpRecordCache(RecordCache):
    """Cache that never stores anything; every lookup is a miss."""

    async def get(self, record_id: RecordId, kind: ResourceKind) -> Optional[Record]:
        return None

    async def get_many(self, kind: ResourceKind, ids: Sequence[RecordId]) -> Dict[RecordId, Record]:
        return {}

    async def put(self, record_id: RecordId, kind: ResourceKind, record: Record) -> None:
        pass

    async def put_many(self, kind: ResourceKind, entries: Sequence[Tuple[RecordId, Record]]) -> None:
        pass
