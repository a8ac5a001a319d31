"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like resource kinds, record IDs and
field selectors, ensuring consistency between the cache, the remote client
and the resolver.
"""

from typing import NewType, Tuple

# === Remote Resource Context ===

# Name of a class of remote-fetchable records; also the IGDB endpoint name
# and the cache partition key.
ResourceKind = NewType("ResourceKind", str)
RecordId = NewType("RecordId", int)
# IGDB field selector, e.g. "*" or "name,url,genres"
FieldSelector = NewType("FieldSelector", str)

GAMES = ResourceKind("games")
GENRES = ResourceKind("genres")
COVERS = ResourceKind("covers")

ALL_FIELDS = FieldSelector("*")

KNOWN_KINDS: Tuple[ResourceKind, ...] = (GAMES, GENRES, COVERS)

# Fields requested when searching games by title
GAME_SEARCH_FIELDS = FieldSelector("id,name,first_release_date,release_dates,slug,genres,url,cover")
