"""Interface for reporting to the user.

Defines the contract for displaying information, errors, warnings and
record listings, allowing different UI implementations (e.g. console).
"""

import abc
from typing import Any, Dict, Sequence

from gamereviews.domain.models.common import ResourceKind
from gamereviews.domain.models.records import Record


class UserInterface(abc.ABC):
    """Abstract Base Class for user-facing output."""

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user.

        Args:
            warning_message: The warning message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user.

        Args:
            info_message: The informational message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_records(self, kind: ResourceKind, records: Sequence[Record]) -> None:
        """Displays fetched records as a table.

        Args:
            kind: The resource kind of the records.
            records: The records to list.
        """
        pass

    def display_cache_counts(self, counts: Dict[str, int]) -> None:
        """Displays the number of cached entries per resource kind."""
        pass
