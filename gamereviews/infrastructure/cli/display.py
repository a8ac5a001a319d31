import logging
from typing import Any, Dict, Optional, Sequence

from rich.box import HEAVY, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gamereviews.domain.interfaces.user_interface import UserInterface
from gamereviews.domain.models.common import ResourceKind
from gamereviews.domain.models.records import Cover, Game, Genre, Record

logger = logging.getLogger(__name__)

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output.

    Writes to stderr by default so stdout stays free for generated HTML.
    """

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console(stderr=True)

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message with enhanced styling.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_records(self, kind: ResourceKind, records: Sequence[Record]) -> None:
        """Displays records as a table, one row per record sorted by ID."""
        table = Table(title=f"{kind} ({len(records)})", box=SIMPLE)
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Name / URL")
        table.add_column("Details", style="dim")

        for record in sorted(records, key=lambda r: r.id):
            table.add_row(str(record.id), *self._describe(record))

        self.console.print(table)

    def display_cache_counts(self, counts: Dict[str, int]) -> None:
        table = Table(title="Cached records", box=SIMPLE)
        table.add_column("Kind")
        table.add_column("Entries", justify="right")
        for kind, count in counts.items():
            table.add_row(kind, str(count))
        self.console.print(table)

    @staticmethod
    def _describe(record: Record) -> Sequence[str]:
        if isinstance(record, Game):
            year = record.first_release_date.strftime("%Y") if record.first_release_date else "?"
            return (record.name, f"{year} - {record.url}")
        if isinstance(record, Genre):
            return (record.name, "")
        if isinstance(record, Cover):
            return (record.url, record.image_id or "")
        return ("", ", ".join(sorted(k for k in record.raw if k != "id")))
