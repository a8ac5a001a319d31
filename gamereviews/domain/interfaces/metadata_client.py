"""Interface for remote game-metadata clients.

Defines the contract for bulk "fetch by ID list" requests against named
resource endpoints (e.g. IGDB's games, genres and covers).
"""

import abc
from typing import List, Sequence

from gamereviews.domain.models.common import FieldSelector, RecordId, ResourceKind
from gamereviews.domain.models.records import Game, Record


class MetadataClient(abc.ABC):
    """Abstract Base Class for remote metadata access."""

    @abc.abstractmethod
    async def fetch(self, kind: ResourceKind, fields: FieldSelector, ids: Sequence[RecordId]) -> List[Record]:
        """Fetches all given IDs of one resource kind in a single request.

        Args:
            kind: The resource kind (remote endpoint) to query.
            fields: The field selector to request.
            ids: The IDs to fetch.

        Returns:
            The decoded records. May hold fewer records than `ids` when the
            remote service caps its result.

        Raises:
            TransportError: If the service cannot be reached.
            RemoteAPIError: On a non-success HTTP status.
            DecodeError: If the response body cannot be decoded.
        """
        pass

    @abc.abstractmethod
    async def search(self, title: str, fields: FieldSelector) -> List[Game]:
        """Searches games by title.

        Args:
            title: Free-text title to search for.
            fields: The field selector to request.

        Returns:
            The matching games, in the order the service ranked them.
        """
        pass
