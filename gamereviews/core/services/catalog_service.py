"""Core service assembling the review catalog.

Loads categories and reviews from the review database, resolves their IGDB
games, genres and covers through the batch resolver and joins everything
into `Section`s for the renderer. Any review whose metadata is missing aborts
the whole catalog instead of rendering a partial page.
"""

import logging
from typing import Dict, List, Sequence

from gamereviews.core.services.batch_resolver import BatchResolver
from gamereviews.domain.errors import MissingMetadataError
from gamereviews.domain.interfaces.review_source import ReviewSource
from gamereviews.domain.models.catalog import GameReview, Review, Section
from gamereviews.domain.models.common import RecordId
from gamereviews.domain.models.records import Cover, Game, Genre

logger = logging.getLogger(__name__)

RELEASE_DATE_FORMAT = "%m/%Y"


class CatalogService:
    """Builds the enriched sections of the review page."""

    def __init__(self, review_source: ReviewSource, resolver: BatchResolver):
        self.review_source = review_source
        self.resolver = resolver

    async def get_sections(self) -> List[Section]:
        """Returns one section per category, in category sort order.

        Raises:
            MissingMetadataError: If a review's game, or that game's cover,
                was not returned by the metadata service.
        """
        categories = await self.review_source.list_categories()
        sections: List[Section] = []

        for category in categories:
            game_reviews = await self.review_source.list_reviews(category.id)

            game_ids = [RecordId(gr.igdb_id) for gr in game_reviews]
            games = await self.resolver.get_games(game_ids)

            genre_ids = sorted({genre_id for game in games for genre_id in game.genres})
            genres = await self.resolver.get_genres([RecordId(g) for g in genre_ids])

            cover_ids = [RecordId(game.cover) for game in games if game.cover is not None]
            covers = await self.resolver.get_covers(cover_ids)

            reviews = [make_review(genres, covers, games, gr) for gr in game_reviews]
            sections.append(Section(category=category, reviews=reviews))
            logger.debug(f"Built section '{category.title}' with {len(reviews)} review(s)")

        return sections


def make_review(
    genres: Sequence[Genre],
    covers: Sequence[Cover],
    games: Sequence[Game],
    game_review: GameReview,
) -> Review:
    """Joins one review row with its resolved IGDB metadata."""
    games_by_id: Dict[int, Game] = {game.id: game for game in games}
    game = games_by_id.get(game_review.igdb_id)
    if game is None:
        raise MissingMetadataError(f"can't find igdb game for {game_review}")

    cover_url = None
    if game.cover is not None:
        cover = next((c for c in covers if c.id == game.cover), None)
        if cover is None:
            raise MissingMetadataError(f"can't find cover for igdb game {game.id} ({game.name})")
        cover_url = cover.url

    genre_names = [genre.name for genre in genres if genre.id in game.genres]
    date_released = (
        game.first_release_date.strftime(RELEASE_DATE_FORMAT) if game.first_release_date else None
    )

    return Review(
        title=game.name,
        link=game.url,
        cover_url=cover_url,
        date_released=date_released,
        rating=game_review.rating,
        description=game_review.description,
        pros=game_review.pros,
        cons=game_review.cons,
        heart_count=game_review.heart_count,
        genres=genre_names,
    )
