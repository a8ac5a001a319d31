from datetime import datetime, timezone

import pytest

from gamereviews.domain.models.common import ResourceKind
from gamereviews.domain.models.records import Cover, Game, Genre, RawRecord, record_type_for

from conftest import PORTAL

def test_game_from_payload_models_known_fields():
    game = Game.from_payload(PORTAL)

    assert game.id == 71
    assert game.name == "Portal"
    assert game.genres == [5, 31]
    assert game.cover == 1001
    assert game.first_release_date == datetime(2007, 10, 9, tzinfo=timezone.utc)

def test_game_payload_keeps_unmodelled_fields():
    """Fields the model does not know about survive to_payload."""
    payload = Game.from_payload(PORTAL).to_payload()

    assert payload["aggregated_rating"] == 90.2
    assert payload["first_release_date"] == 1191888000
    assert Game.from_payload(payload) == Game.from_payload(PORTAL)

def test_game_without_optional_fields():
    game = Game.from_payload({"id": 3, "name": "Obscure"})

    assert game.cover is None
    assert game.genres == []
    assert game.first_release_date is None
    assert "cover" not in game.to_payload()

@pytest.mark.parametrize("payload", [
    {"name": "No id"},
    {"id": "71", "name": "String id"},
    {"id": True, "name": "Bool id"},
    {"id": 71},
    {"id": 71, "name": "Bad genres", "genres": ["rpg"]},
    {"id": 71, "name": "Bad cover", "cover": "1001"},
])
def test_game_rejects_malformed_payloads(payload):
    with pytest.raises((KeyError, TypeError)):
        Game.from_payload(payload)

def test_cover_requires_url():
    with pytest.raises(KeyError):
        Cover.from_payload({"id": 1001, "image_id": "co1x7d"})

def test_record_type_for_unknown_kind_is_raw():
    record_type = record_type_for(ResourceKind("platforms"))
    record = record_type.from_payload({"id": 6, "name": "PC", "abbreviation": "PC"})

    assert record_type is RawRecord
    assert record.to_payload() == {"id": 6, "name": "PC", "abbreviation": "PC"}

def test_record_type_for_known_kinds():
    assert record_type_for(ResourceKind("games")) is Game
    assert record_type_for(ResourceKind("genres")) is Genre
    assert record_type_for(ResourceKind("covers")) is Cover
