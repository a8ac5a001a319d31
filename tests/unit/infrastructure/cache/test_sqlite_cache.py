import sqlite3

import pytest

from gamereviews.domain.errors import CacheStoreError
from gamereviews.domain.models.common import COVERS, GAMES, GENRES, RecordId, ResourceKind
from gamereviews.domain.models.records import Game, Genre, RawRecord
from gamereviews.infrastructure.cache import sqlite_cache
from gamereviews.infrastructure.cache.sqlite_cache import SqliteRecordCache

from conftest import PORTAL, PORTAL_2

@pytest.fixture
def cache(tmp_path):
    return SqliteRecordCache(tmp_path / "cache.sqlite3")

@pytest.mark.asyncio
async def test_get_miss_returns_none(cache):
    assert await cache.get(RecordId(71), GAMES) is None

@pytest.mark.asyncio
async def test_put_then_get(cache):
    game = Game.from_payload(PORTAL)
    await cache.put(game.id, GAMES, game)

    cached = await cache.get(RecordId(71), GAMES)

    assert cached == game
    assert cached.raw["aggregated_rating"] == 90.2

@pytest.mark.asyncio
async def test_get_many_returns_only_stored_ids(cache):
    portal, portal_2 = Game.from_payload(PORTAL), Game.from_payload(PORTAL_2)
    await cache.put_many(GAMES, [(portal.id, portal), (portal_2.id, portal_2)])

    found = await cache.get_many(GAMES, [RecordId(71), RecordId(99), RecordId(72)])

    assert set(found) == {71, 72}
    assert found[RecordId(72)].name == "Portal 2"

@pytest.mark.asyncio
async def test_get_many_empty_ids(cache):
    assert await cache.get_many(GAMES, []) == {}

@pytest.mark.asyncio
async def test_kinds_do_not_share_entries(cache):
    """A genre and a cover with the same numeric ID are distinct entries."""
    await cache.put(RecordId(5), GENRES, Genre.from_payload({"id": 5, "name": "Shooter"}))

    assert await cache.get(RecordId(5), COVERS) is None
    assert await cache.get_many(COVERS, [RecordId(5)]) == {}
    assert (await cache.get(RecordId(5), GENRES)).name == "Shooter"

@pytest.mark.asyncio
async def test_latest_write_wins(cache):
    await cache.put(RecordId(5), GENRES, Genre.from_payload({"id": 5, "name": "Shooter"}))
    await cache.put(RecordId(5), GENRES, Genre.from_payload({"id": 5, "name": "First-person shooter"}))

    assert (await cache.get(RecordId(5), GENRES)).name == "First-person shooter"
    assert (await cache.get_many(GENRES, [RecordId(5)]))[RecordId(5)].name == "First-person shooter"
    assert await cache.count(GENRES) == 1

@pytest.mark.asyncio
async def test_unknown_kind_round_trips_raw_payload(cache):
    kind = ResourceKind("platforms")
    record = RawRecord.from_payload({"id": 6, "name": "PC (Microsoft Windows)"})
    await cache.put(record.id, kind, record)

    cached = await cache.get(RecordId(6), kind)

    assert isinstance(cached, RawRecord)
    assert cached.raw == {"id": 6, "name": "PC (Microsoft Windows)"}

@pytest.mark.asyncio
async def test_get_many_spans_several_queries(cache, monkeypatch):
    monkeypatch.setattr(sqlite_cache, "MAX_IDS_PER_QUERY", 2)
    genres = [Genre.from_payload({"id": i, "name": f"Genre {i}"}) for i in range(1, 6)]
    await cache.put_many(GENRES, [(g.id, g) for g in genres])

    found = await cache.get_many(GENRES, [RecordId(i) for i in range(1, 7)])

    assert sorted(found) == [1, 2, 3, 4, 5]

@pytest.mark.asyncio
async def test_entries_persist_across_instances(tmp_path):
    path = tmp_path / "cache.sqlite3"
    game = Game.from_payload(PORTAL)
    await SqliteRecordCache(path).put(game.id, GAMES, game)

    assert await SqliteRecordCache(path).get(RecordId(71), GAMES) == game

@pytest.mark.asyncio
async def test_corrupted_entry_raises_cache_store_error(cache):
    await cache.count(GAMES)
    conn = sqlite3.connect(cache.path)
    conn.execute("INSERT INTO igdb_cache (igdb_id, endpoint, value) VALUES (71, 'games', 'not json')")
    conn.commit()
    conn.close()

    with pytest.raises(CacheStoreError):
        await cache.get(RecordId(71), GAMES)

def test_constructor_does_not_create_the_file(tmp_path):
    path = tmp_path / "cache.sqlite3"

    SqliteRecordCache(path)

    assert not path.exists()

@pytest.mark.asyncio
async def test_schema_is_created_on_first_use(tmp_path):
    path = tmp_path / "cache.sqlite3"
    cache = SqliteRecordCache(path)

    assert await cache.count(GAMES) == 0
    assert path.exists()

@pytest.mark.asyncio
async def test_unopenable_database_raises_cache_store_error(tmp_path):
    # A directory cannot be opened as a database file
    cache = SqliteRecordCache(tmp_path)

    with pytest.raises(CacheStoreError):
        await cache.get_many(GAMES, [RecordId(71)])

@pytest.mark.asyncio
async def test_failed_insert_rolls_back_the_whole_batch(cache):
    await cache.count(GAMES)
    conn = sqlite3.connect(cache.path)
    conn.execute(
        "CREATE TRIGGER reject_999 BEFORE INSERT ON igdb_cache WHEN NEW.igdb_id = 999 "
        "BEGIN SELECT RAISE(ABORT, 'rejected'); END"
    )
    conn.commit()
    conn.close()
    portal = Game.from_payload(PORTAL)
    rejected = Game.from_payload({**PORTAL, "id": 999})

    with pytest.raises(CacheStoreError):
        await cache.put_many(GAMES, [(portal.id, portal), (rejected.id, rejected)])

    assert await cache.count(GAMES) == 0
    assert await cache.get(RecordId(71), GAMES) is None

@pytest.mark.asyncio
async def test_unserializable_record_stores_nothing(cache):
    first = RawRecord.from_payload({"id": 1, "name": "ok"})
    broken = RawRecord.from_payload({"id": 2, "blob": object()})
    last = RawRecord.from_payload({"id": 3, "name": "ok"})
    kind = ResourceKind("platforms")

    with pytest.raises(CacheStoreError):
        await cache.put_many(kind, [(first.id, first), (broken.id, broken), (last.id, last)])

    assert await cache.count(kind) == 0

@pytest.mark.asyncio
async def test_read_failure_raises_cache_store_error(cache):
    await cache.count(GAMES)
    conn = sqlite3.connect(cache.path)
    conn.execute("DROP TABLE igdb_cache")
    conn.commit()
    conn.close()

    with pytest.raises(CacheStoreError):
        await cache.get_many(GAMES, [RecordId(71)])

@pytest.mark.asyncio
async def test_count_counts_distinct_ids_per_kind(cache):
    portal = Game.from_payload(PORTAL)
    await cache.put(portal.id, GAMES, portal)
    await cache.put(portal.id, GAMES, portal)
    await cache.put(RecordId(5), GENRES, Genre.from_payload({"id": 5, "name": "Shooter"}))

    assert await cache.count(GAMES) == 1
    assert await cache.count(GENRES) == 1
    assert await cache.count(COVERS) == 0
