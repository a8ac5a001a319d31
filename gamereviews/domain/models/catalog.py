"""Domain models for the review catalog.

`Category` and `GameReview` mirror rows of the review database; `Review` and
`Section` are what the HTML template consumes.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Category:
    """A titled group of reviews, rendered as one section of the page."""
    id: int
    title: str
    sort_order: int
    description: str


@dataclass
class GameReview:
    """A review row; `igdb_id` links it to a remote `games` record."""
    id: int
    igdb_id: int
    title: str
    description: str
    category_id: int
    year_played: Optional[str] = None
    rating: Optional[int] = None
    pros: Optional[str] = None
    cons: Optional[str] = None
    heart_count: Optional[int] = None


@dataclass
class Review:
    """A review enriched with its game metadata, ready for rendering."""
    title: str
    link: str
    cover_url: Optional[str]
    date_released: Optional[str]
    rating: Optional[int]
    description: str
    pros: Optional[str] = None
    cons: Optional[str] = None
    heart_count: Optional[int] = None
    genres: List[str] = field(default_factory=list)


@dataclass
class Section:
    category: Category
    reviews: List[Review] = field(default_factory=list)
