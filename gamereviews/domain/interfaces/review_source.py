"""Interface for the read-only review database."""

import abc
from typing import List

from gamereviews.domain.models.catalog import Category, GameReview


class ReviewSource(abc.ABC):
    """Abstract Base Class for reading categories and reviews."""

    @abc.abstractmethod
    async def list_categories(self) -> List[Category]:
        """Returns every category ordered by its sort order."""
        pass

    @abc.abstractmethod
    async def list_reviews(self, category_id: int) -> List[GameReview]:
        """Returns a category's reviews, best rated first, then by title."""
        pass
