"""IGDB records.

Each record has a mandatory numeric `id` (the cache and lookup key) and keeps
the complete payload returned by the API in `raw`, so fields this module does
not model survive a round trip through the cache.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from gamereviews.domain.models.common import COVERS, GAMES, GENRES, RecordId, ResourceKind

Payload = Dict[str, Any]
R = TypeVar("R", bound="Record")


def _require_id(payload: Mapping[str, Any]) -> RecordId:
    record_id = payload["id"]
    # bool is an int subclass, reject it explicitly
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        raise TypeError(f"record id must be an integer, got {record_id!r}")
    return RecordId(record_id)


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"field '{key}' must be a string, got {value!r}")
    return value


def _required_str(payload: Mapping[str, Any], key: str) -> str:
    value = _optional_str(payload, key)
    if value is None:
        raise KeyError(key)
    return value


def _timestamp(value: Optional[Union[int, float]]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"timestamp must be a number, got {value!r}")
    return datetime.fromtimestamp(value, tz=timezone.utc)


@dataclass(frozen=True)
class Record:
    """Base for everything fetched from a resource endpoint."""

    id: RecordId
    raw: Payload = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls: Type[R], payload: Mapping[str, Any]) -> R:
        """Builds a record from a decoded JSON object.

        Raises:
            KeyError, TypeError, ValueError: If the payload does not match the
                record's schema.
        """
        return cls(id=_require_id(payload), raw=dict(payload))

    def _modelled_fields(self) -> Payload:
        return {"id": self.id}

    def to_payload(self) -> Payload:
        """Returns the JSON-serializable payload, unknown fields included."""
        payload = dict(self.raw)
        payload.update(self._modelled_fields())
        return payload


@dataclass(frozen=True)
class RawRecord(Record):
    """Record of a kind with no dedicated model; only `id` is interpreted."""


@dataclass(frozen=True)
class Game(Record):
    name: str = ""
    slug: str = ""
    url: str = ""
    summary: Optional[str] = None
    first_release_date: Optional[datetime] = None
    genres: List[int] = field(default_factory=list)
    cover: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Game":
        genres = payload.get("genres") or []
        if not isinstance(genres, list) or not all(isinstance(g, int) for g in genres):
            raise TypeError(f"field 'genres' must be a list of ids, got {genres!r}")
        cover = payload.get("cover")
        if cover is not None and (isinstance(cover, bool) or not isinstance(cover, int)):
            raise TypeError(f"field 'cover' must be an id, got {cover!r}")
        return cls(
            id=_require_id(payload),
            raw=dict(payload),
            name=_required_str(payload, "name"),
            slug=_optional_str(payload, "slug") or "",
            url=_optional_str(payload, "url") or "",
            summary=_optional_str(payload, "summary"),
            first_release_date=_timestamp(payload.get("first_release_date")),
            genres=list(genres),
            cover=cover,
        )

    def _modelled_fields(self) -> Payload:
        fields: Payload = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "url": self.url,
            "genres": list(self.genres),
        }
        if self.summary is not None:
            fields["summary"] = self.summary
        if self.first_release_date is not None:
            fields["first_release_date"] = int(self.first_release_date.timestamp())
        if self.cover is not None:
            fields["cover"] = self.cover
        return fields


@dataclass(frozen=True)
class Genre(Record):
    name: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Genre":
        return cls(id=_require_id(payload), raw=dict(payload), name=_required_str(payload, "name"))

    def _modelled_fields(self) -> Payload:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Cover(Record):
    url: str = ""
    image_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Cover":
        return cls(
            id=_require_id(payload),
            raw=dict(payload),
            url=_required_str(payload, "url"),
            image_id=_optional_str(payload, "image_id"),
        )

    def _modelled_fields(self) -> Payload:
        fields: Payload = {"id": self.id, "url": self.url}
        if self.image_id is not None:
            fields["image_id"] = self.image_id
        return fields


RECORD_TYPES: Dict[ResourceKind, Type[Record]] = {
    GAMES: Game,
    GENRES: Genre,
    COVERS: Cover,
}


def record_type_for(kind: ResourceKind) -> Type[Record]:
    """Returns the record model for a kind, `RawRecord` for unmodelled kinds."""
    return RECORD_TYPES.get(kind, RawRecord)
