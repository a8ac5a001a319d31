"""Main entry point for the gamereviews application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import io
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

from gamereviews import __version__
# --- Core Layer ---
from gamereviews.core.command_handler import CommandHandler
from gamereviews.core.services.batch_resolver import BatchResolver
from gamereviews.core.services.catalog_service import CatalogService
# --- Domain Layer ---
from gamereviews.domain.errors import GameReviewsError, ReviewStoreError
from gamereviews.domain.interfaces.cache import RecordCache
# --- Infrastructure Layer ---
from gamereviews.infrastructure.cache.memory_cache import NoOpRecordCache
from gamereviews.infrastructure.cache.sqlite_cache import SqliteRecordCache
from gamereviews.infrastructure.cli.display import ConsoleDisplay
from gamereviews.infrastructure.config.settings import (
    get_access_token,
    get_api_base_url,
    get_client_id,
    get_client_secret,
    get_config,
    get_database_path,
    get_rate_limit,
    get_token_url,
    load_configuration,
)
from gamereviews.infrastructure.igdb.client import IgdbClient
from gamereviews.infrastructure.monitoring.logger_setup import setup_logging
from gamereviews.infrastructure.rendering.html_renderer import HtmlRenderer
from gamereviews.infrastructure.resilience.rate_limiter import RateLimiter
from gamereviews.infrastructure.reviews.sqlite_reviews import SqliteReviewSource

logger = logging.getLogger(__name__)


# --- Dependency Injection Container (Manual) ---

async def create_metadata_client(rate_limiter: RateLimiter) -> IgdbClient:
    """Authenticates against Twitch and builds the IGDB client from configuration."""
    return await IgdbClient.create(
        client_id=get_client_id(),
        client_secret=get_client_secret(),
        rate_limiter=rate_limiter,
        access_token=get_access_token(),
        api_base_url=get_api_base_url(),
        token_url=get_token_url(),
    )


def _configure_logging() -> None:
    log_level_name = str(get_config('logging.level', 'INFO')).upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    log_file = get_config('logging.file')
    log_format = get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    setup_logging(log_level=log_level, log_file=log_file, log_format=log_format)


@asynccontextmanager
async def create_dependencies(
    database: Optional[Path] = None,
    use_cache: bool = True,
    connect: bool = True,
    require_database: bool = False,
) -> AsyncIterator[Dict[str, Any]]:
    """Creates and wires up the dependencies one command needs.

    This acts as the Composition Root. Authentication is asynchronous, so the
    graph is built per command inside the running event loop, and the IGDB
    client is closed when the command finishes.

    Args:
        database: Review database path; falls back to configuration.
        use_cache: False swaps the SQLite record cache for a no-op cache.
        connect: Whether the command needs an authenticated IGDB client.
        require_database: Fail early if the review database does not exist.
    """
    logger.info("Initializing application dependencies...")
    load_configuration()
    _configure_logging()

    ui = ConsoleDisplay()
    dependencies: Dict[str, Any] = {'ui': ui}
    client: Optional[IgdbClient] = None
    try:
        database_path = database or get_database_path()
        if require_database and not database_path.is_file():
            raise ReviewStoreError(f"Review database not found: {database_path}")

        cache: RecordCache = SqliteRecordCache(database_path) if use_cache else NoOpRecordCache()
        dependencies['cache'] = cache

        resolver = None
        catalog_service = None
        renderer = None
        if connect:
            rate_limiter = RateLimiter(max_requests=get_rate_limit())
            client = await create_metadata_client(rate_limiter)
            resolver = BatchResolver(cache=cache, client=client)
            catalog_service = CatalogService(
                review_source=SqliteReviewSource(database_path),
                resolver=resolver,
            )
            renderer = HtmlRenderer()
        dependencies['metadata_client'] = client

        dependencies['command_handler'] = CommandHandler(
            cache=cache,
            ui=ui,
            resolver=resolver,
            catalog_service=catalog_service,
            renderer=renderer,
        )
        logger.info("All dependencies initialized successfully.")
    except GameReviewsError as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        ui.display_error(f"Application Initialization Failed: {e}")
        if client is not None:
            await client.aclose()
        raise

    try:
        yield dependencies
    finally:
        if client is not None:
            await client.aclose()


# --- Typer App Definition ---
app = typer.Typer(
    name="gamereviews",
    help="gamereviews: renders a static HTML page of game reviews enriched with IGDB metadata.",
    add_completion=False,
)


# --- Helper for Running Async Commands ---
def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs an async command; application errors end the process with status 1.

    The error has already been logged and shown to the user by the time it
    reaches this point.
    """
    try:
        return asyncio.run(coro)
    except GameReviewsError as e:
        logger.debug(f"Command aborted: {e!r}")
        raise typer.Exit(code=1)


# --- CLI Commands ---

# Shared options
DatabaseOption = Annotated[
    Optional[Path],
    typer.Option("--database", "-d", dir_okay=False,
                 help="Review database (also holds the IGDB cache). Defaults to game_reviews.sqlite3."),
]

NoCacheOption = Annotated[
    bool,
    typer.Option("--no-cache", help="Bypass the IGDB cache: always fetch, never store."),
]


@app.command()
def generate(
    database: DatabaseOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", dir_okay=False, writable=True,
                     help="Write the HTML page to this file instead of stdout."),
    ] = None,
    no_cache: NoCacheOption = False,
):
    """Render the review page as HTML."""
    async def _generate() -> int:
        async with create_dependencies(database, use_cache=not no_cache, require_database=True) as deps:
            handler: CommandHandler = deps['command_handler']
            if output is None:
                return await handler.handle_generate(sys.stdout)
            # Render fully before touching the file: a failed run keeps the previous page
            page = io.StringIO()
            count = await handler.handle_generate(page)
            output.write_text(page.getvalue(), encoding='utf-8')
            deps['ui'].display_info(f"Wrote {count} review(s) to {output}")
            return count

    run_async(_generate())


@app.command()
def lookup(
    kind: Annotated[str, typer.Argument(help="IGDB endpoint, e.g. 'games', 'genres' or 'covers'.")],
    ids: Annotated[List[int], typer.Argument(help="Record IDs to resolve.")],
    fields: Annotated[str, typer.Option("--fields", "-f", help="IGDB field selector.")] = "*",
    database: DatabaseOption = None,
    no_cache: NoCacheOption = False,
):
    """Resolve IGDB records by ID through the cache."""
    async def _lookup() -> None:
        async with create_dependencies(database, use_cache=not no_cache) as deps:
            handler: CommandHandler = deps['command_handler']
            await handler.handle_lookup(kind, ids, fields)

    run_async(_lookup())


@app.command()
def search(
    title: Annotated[str, typer.Argument(help="Game title to search for.")],
    database: DatabaseOption = None,
):
    """Search IGDB games by title (to find the IGDB ID of a new review)."""
    async def _search() -> None:
        async with create_dependencies(database) as deps:
            handler: CommandHandler = deps['command_handler']
            await handler.handle_search(title)

    run_async(_search())


@app.command(name="cache-info")
def cache_info_command(
    database: DatabaseOption = None,
):
    """Show how many records of each kind are cached."""
    async def _cache_info() -> None:
        async with create_dependencies(database, connect=False, require_database=True) as deps:
            handler: CommandHandler = deps['command_handler']
            await handler.handle_cache_info()

    run_async(_cache_info())


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gamereviews {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
):
    """Game reviews catalog generator."""


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
