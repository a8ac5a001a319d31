"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the work
to the application services (CatalogService, BatchResolver) and the HTML
renderer. Failures are logged, shown to the user and then re-raised so the
entry point can exit with a non-zero status.
"""

import logging
from typing import List, Optional, Sequence, TextIO

from gamereviews.core.services.batch_resolver import BatchResolver
from gamereviews.core.services.catalog_service import CatalogService
from gamereviews.domain.errors import GameReviewsError
from gamereviews.domain.interfaces.cache import RecordCache
from gamereviews.domain.interfaces.user_interface import UserInterface
from gamereviews.domain.models.common import KNOWN_KINDS, FieldSelector, RecordId, ResourceKind
from gamereviews.infrastructure.rendering.html_renderer import HtmlRenderer

logger = logging.getLogger(__name__)

class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        cache: RecordCache,
        ui: UserInterface,
        resolver: Optional[BatchResolver] = None,
        catalog_service: Optional[CatalogService] = None,
        renderer: Optional[HtmlRenderer] = None,
    ):
        """Initializes the CommandHandler.

        Commands that talk to IGDB need `resolver` (and `generate` also
        `catalog_service` and `renderer`); `cache-info` only needs the cache.
        """
        self.cache = cache
        self.ui = ui
        self.resolver = resolver
        self.catalog_service = catalog_service
        self.renderer = renderer

    def _require_resolver(self) -> BatchResolver:
        if self.resolver is None:
            raise RuntimeError("This command requires an IGDB resolver.")
        return self.resolver

    async def handle_generate(self, output: TextIO) -> int:
        """Handles the 'generate' command: writes the HTML page to `output`.

        Returns:
            The total number of reviews rendered.
        """
        if self.catalog_service is None or self.renderer is None:
            raise RuntimeError("The generate command requires a catalog service and a renderer.")
        logger.info("Handling 'generate' command.")
        try:
            sections = await self.catalog_service.get_sections()
            html = self.renderer.render(sections)
        except GameReviewsError as e:
            logger.error(f"Generate command failed: {e}", exc_info=True)
            self.ui.display_error(f"Generation failed: {e}")
            raise
        output.write(html)
        total_count = sum(len(section.reviews) for section in sections)
        logger.info(f"Generated reviews for {total_count} games")
        return total_count

    async def handle_lookup(self, kind: str, ids: Sequence[int], fields: str = "*") -> None:
        """Handles the 'lookup' command: resolves records through the cache."""
        resolver = self._require_resolver()
        resource_kind = ResourceKind(kind)
        if resource_kind not in KNOWN_KINDS:
            self.ui.display_warning(f"'{kind}' is not a modelled kind; records are shown raw.")
        logger.info(f"Handling 'lookup' command for {len(ids)} '{kind}' id(s)")
        try:
            records = await resolver.resolve(
                resource_kind, FieldSelector(fields), [RecordId(i) for i in ids]
            )
        except GameReviewsError as e:
            logger.error(f"Lookup command failed: {e}", exc_info=True)
            self.ui.display_error(f"Lookup failed: {e}")
            raise
        found = {record.id for record in records}
        missing: List[int] = [i for i in dict.fromkeys(ids) if i not in found]
        if missing:
            self.ui.display_warning(f"No '{kind}' record returned for id(s): {missing}")
        self.ui.display_records(resource_kind, records)

    async def handle_search(self, title: str) -> None:
        """Handles the 'search' command: lists games matching a title."""
        resolver = self._require_resolver()
        logger.info(f"Handling 'search' command for title: {title!r}")
        try:
            games = await resolver.search_games(title)
        except GameReviewsError as e:
            logger.error(f"Search command failed: {e}", exc_info=True)
            self.ui.display_error(f"Search failed: {e}")
            raise
        if not games:
            self.ui.display_info(f"No game found matching {title!r}.")
            return
        self.ui.display_records(ResourceKind("games"), games)

    async def handle_cache_info(self) -> None:
        """Handles the 'cache-info' command: per-kind entry counts."""
        logger.info("Handling 'cache-info' command.")
        try:
            counts = {kind: await self.cache.count(kind) for kind in KNOWN_KINDS}
        except GameReviewsError as e:
            logger.error(f"Failed to read cache statistics: {e}", exc_info=True)
            self.ui.display_error(f"Failed to read cache: {e}")
            raise
        self.ui.display_cache_counts(counts)
