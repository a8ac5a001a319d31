"""Core service resolving records by ID through the cache (cache-aside).

For one resource kind and a list of IDs, the resolver reads every cached
record, fetches only the misses from the remote service in a single bulk
request, writes the fetched records back to the cache and returns both.
The cache write always completes before `resolve` returns, so a later call
with overlapping IDs sees cache hits.
"""

import logging
from typing import List, Sequence

from gamereviews.domain.interfaces.cache import RecordCache
from gamereviews.domain.interfaces.metadata_client import MetadataClient
from gamereviews.domain.models.common import (
    ALL_FIELDS,
    COVERS,
    GAME_SEARCH_FIELDS,
    GAMES,
    GENRES,
    FieldSelector,
    RecordId,
    ResourceKind,
)
from gamereviews.domain.models.records import Cover, Game, Genre, Record

logger = logging.getLogger(__name__)


class BatchResolver:
    """Orchestrates the record cache and the remote metadata client."""

    def __init__(self, cache: RecordCache, client: MetadataClient):
        """Initializes the resolver with its injected collaborators.

        Args:
            cache: Where fetched records are persisted and looked up.
            client: The remote service queried for cache misses.
        """
        self.cache = cache
        self.client = client

    async def resolve(self, kind: ResourceKind, fields: FieldSelector, ids: Sequence[RecordId]) -> List[Record]:
        """Returns the records for `ids`, fetching only the uncached ones.

        The order of the result is unspecified. IDs the remote service did
        not return are simply absent.

        Raises:
            CacheStoreError: If reading or writing the cache fails. A write
                failure aborts the call even though records were fetched.
            TransportError, RemoteAPIError, DecodeError: If the remote fetch
                fails; nothing is written to the cache in that case.
        """
        cached = await self.cache.get_many(kind, ids)
        misses = [record_id for record_id in ids if record_id not in cached]

        if not misses:
            logger.debug(f"All {len(ids)} '{kind}' id(s) served from cache")
            return list(cached.values())

        logger.info(f"Resolving '{kind}': {len(cached)} cached, {len(misses)} to fetch")
        fetched = await self.client.fetch(kind, fields, misses)
        await self.cache.put_many(kind, [(record.id, record) for record in fetched])

        result: List[Record] = list(cached.values())
        result.extend(fetched)
        return result

    async def get_games(self, ids: Sequence[RecordId]) -> List[Game]:
        return [r for r in await self.resolve(GAMES, ALL_FIELDS, ids) if isinstance(r, Game)]

    async def get_genres(self, ids: Sequence[RecordId]) -> List[Genre]:
        return [r for r in await self.resolve(GENRES, ALL_FIELDS, ids) if isinstance(r, Genre)]

    async def get_covers(self, ids: Sequence[RecordId]) -> List[Cover]:
        return [r for r in await self.resolve(COVERS, ALL_FIELDS, ids) if isinstance(r, Cover)]

    async def search_games(self, title: str) -> List[Game]:
        """Searches games by title and caches every match.

        Used while populating the review database with IGDB IDs.
        """
        games = await self.client.search(title, GAME_SEARCH_FIELDS)
        await self.cache.put_many(GAMES, [(game.id, game) for game in games])
        return games
