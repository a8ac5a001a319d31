"""Read-only access to the review database (`category` and `game_review` tables)."""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List, Union

from gamereviews.domain.errors import ReviewStoreError
from gamereviews.domain.interfaces.review_source import ReviewSource
from gamereviews.domain.models.catalog import Category, GameReview

logger = logging.getLogger(__name__)


class SqliteReviewSource(ReviewSource):
    """Reads categories and reviews from a local SQLite file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        if not self._path.is_file():
            raise ReviewStoreError(f"Review database not found: {self._path}")
        conn = sqlite3.connect(f"{self._path.resolve().as_uri()}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        return conn

    def _fetch_categories(self) -> List[Category]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT id, title, sort_order, description FROM category ORDER BY sort_order"
            ).fetchall()
        return [
            Category(
                id=row["id"],
                title=row["title"],
                sort_order=row["sort_order"],
                description=row["description"],
            )
            for row in rows
        ]

    def _fetch_reviews(self, category_id: int) -> List[GameReview]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                """SELECT id, igdb_id, title, year_played, rating, description,
                          pros, cons, heart_count, category_id
                   FROM game_review
                   WHERE category_id = ?
                   ORDER BY rating DESC, title""",
                (category_id,),
            ).fetchall()
        return [
            GameReview(
                id=row["id"],
                igdb_id=row["igdb_id"],
                title=row["title"],
                description=row["description"],
                category_id=row["category_id"],
                year_played=row["year_played"],
                rating=row["rating"],
                pros=row["pros"],
                cons=row["cons"],
                heart_count=row["heart_count"],
            )
            for row in rows
        ]

    async def list_categories(self) -> List[Category]:
        try:
            categories = await asyncio.to_thread(self._fetch_categories)
        except sqlite3.Error as e:
            raise ReviewStoreError(f"Failed to read categories from {self._path}: {e}") from e
        logger.debug(f"Loaded {len(categories)} categories")
        return categories

    async def list_reviews(self, category_id: int) -> List[GameReview]:
        try:
            return await asyncio.to_thread(self._fetch_reviews, category_id)
        except sqlite3.Error as e:
            raise ReviewStoreError(f"Failed to read reviews of category {category_id}: {e}") from e
