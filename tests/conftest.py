import re
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from typer.testing import CliRunner

from gamereviews.domain.interfaces.user_interface import UserInterface
from gamereviews.infrastructure.config.settings import clear_test_config
from gamereviews.infrastructure.resilience.rate_limiter import RateLimiter

API_BASE_URL = "https://api.igdb.test/v4"
TOKEN_URL = "https://id.twitch.test/oauth2/token"

# --- Sample IGDB payloads ---

PORTAL = {
    "id": 71,
    "name": "Portal",
    "slug": "portal",
    "url": "https://www.igdb.com/games/portal",
    "first_release_date": 1191888000,  # 2007-10-09
    "genres": [5, 31],
    "cover": 1001,
    "aggregated_rating": 90.2,
}
PORTAL_2 = {
    "id": 72,
    "name": "Portal 2",
    "slug": "portal-2",
    "url": "https://www.igdb.com/games/portal-2",
    "first_release_date": 1303171200,  # 2011-04-19
    "genres": [5, 31],
    "cover": 1002,
}
GENRE_PAYLOADS = [
    {"id": 5, "name": "Shooter"},
    {"id": 31, "name": "Adventure"},
]
COVER_PAYLOADS = [
    {"id": 1001, "url": "//images.igdb.com/igdb/image/upload/t_thumb/co1x7d.jpg", "image_id": "co1x7d"},
    {"id": 1002, "url": "//images.igdb.com/igdb/image/upload/t_thumb/co1rs4.jpg", "image_id": "co1rs4"},
]


class FakeIgdbServer:
    """Serves IGDB-like responses to an httpx.MockTransport and records every request."""

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.records = records if records is not None else {}
        self.requests: List[Tuple[str, str]] = []
        self.token_requests: List[httpx.Request] = []
        self.status_code = 200
        self.raw_body: Optional[str] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/token"):
            self.token_requests.append(request)
            return httpx.Response(200, json={"access_token": "fake-token", "expires_in": 5000000, "token_type": "bearer"})

        kind = request.url.path.rsplit("/", 1)[-1]
        body = request.content.decode()
        self.requests.append((kind, body))
        if self.status_code != 200:
            return httpx.Response(self.status_code, text='[{"title": "Syntax Error"}]')
        if self.raw_body is not None:
            return httpx.Response(200, text=self.raw_body)

        items = self.records.get(kind, [])
        match = re.search(r"where id=\(([^)]*)\)", body)
        if match:
            wanted = {int(i) for i in match.group(1).split(",") if i}
            items = [item for item in items if item["id"] in wanted]
        return httpx.Response(200, json=items)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture
def fake_igdb() -> FakeIgdbServer:
    """An IGDB stand-in knowing both Portal games, their genres and covers."""
    return FakeIgdbServer({
        "games": [PORTAL, PORTAL_2],
        "genres": list(GENRE_PAYLOADS),
        "covers": list(COVER_PAYLOADS),
    })

@pytest.fixture
def http_client(fake_igdb: FakeIgdbServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=fake_igdb.transport())

@pytest.fixture
def rate_limiter() -> RateLimiter:
    """A limiter generous enough never to delay a test."""
    return RateLimiter(max_requests=1000, time_window=1.0)

@pytest.fixture
def mock_ui(mocker):
    return mocker.MagicMock(spec=UserInterface)

@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()

@pytest.fixture
def review_db(tmp_path: Path) -> Path:
    """Creates a review database with two categories and three reviews."""
    path = tmp_path / "game_reviews.sqlite3"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(
            """
            CREATE TABLE category (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                sort_order INTEGER NOT NULL,
                description TEXT NOT NULL
            );
            CREATE TABLE game_review (
                id INTEGER PRIMARY KEY,
                igdb_id INTEGER NOT NULL,
                title TEXT NOT NULL,
                year_played TEXT,
                rating INTEGER,
                description TEXT NOT NULL,
                pros TEXT,
                cons TEXT,
                heart_count INTEGER,
                category_id INTEGER NOT NULL REFERENCES category(id)
            );
            INSERT INTO category VALUES (1, 'Coups de coeur', 1, 'Mes jeux preferes.');
            INSERT INTO category VALUES (2, 'A eviter', 2, 'Pas pour moi.');
            INSERT INTO game_review VALUES (1, 71, 'Portal', '2008', 17, 'Court mais brillant.', 'Gameplay', 'Trop court', 2, 1);
            INSERT INTO game_review VALUES (2, 72, 'Portal 2', '2011', 19, 'Encore mieux.', NULL, NULL, 3, 1);
            INSERT INTO game_review VALUES (3, 71, 'Portal (rejoue)', '2020', 12, 'Moins surprenant.', NULL, 'Deja vu', NULL, 2);
            """
        )
        conn.commit()
    finally:
        conn.close()
    return path
