"""Interface for the record cache.

Defines the contract for durably storing previously fetched records keyed by
(record ID, resource kind). Distinct kinds never share entries, even when
their numeric IDs collide.
"""

import abc
from typing import Dict, Optional, Sequence, Tuple

from gamereviews.domain.models.common import RecordId, ResourceKind
from gamereviews.domain.models.records import Record


class RecordCache(abc.ABC):
    """Abstract Base Class for record caching operations.

    Implementations raise `CacheStoreError` for any storage or serialization
    failure; a plain miss is never an error.
    """

    @abc.abstractmethod
    async def get(self, record_id: RecordId, kind: ResourceKind) -> Optional[Record]:
        """Retrieves a single record asynchronously.

        Args:
            record_id: The record's numeric ID.
            kind: The resource kind the record belongs to.

        Returns:
            The stored record, or None on a miss.
        """
        pass

    @abc.abstractmethod
    async def get_many(self, kind: ResourceKind, ids: Sequence[RecordId]) -> Dict[RecordId, Record]:
        """Retrieves every requested record that is stored under `kind`.

        Args:
            kind: The resource kind to look in.
            ids: The IDs to look up. Absent IDs are omitted from the result.

        Returns:
            A mapping containing only the subset of `ids` actually stored.
        """
        pass

    @abc.abstractmethod
    async def put(self, record_id: RecordId, kind: ResourceKind, record: Record) -> None:
        """Stores a record; it is visible to readers once this returns.

        Args:
            record_id: The ID to store the record under.
            kind: The resource kind of the record.
            record: The record to store.
        """
        pass

    @abc.abstractmethod
    async def put_many(self, kind: ResourceKind, entries: Sequence[Tuple[RecordId, Record]]) -> None:
        """Stores several records as one atomic unit.

        If any insert fails the whole batch fails and nothing from it is
        guaranteed to be persisted.

        Args:
            kind: The resource kind of every record in the batch.
            entries: (id, record) pairs to store.
        """
        pass

    async def count(self, kind: ResourceKind) -> int:
        """Returns the number of stored entries for a kind (diagnostics only)."""
        return 0
