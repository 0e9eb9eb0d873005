import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock, MagicMock

from movietrack.main import app
from movietrack.clients.tmdb_client import TMDBClient
from movietrack.core.security import create_access_token
from movietrack.dependencies import get_db_pool, get_catalog_client

TMDB_BASE_URL = "https://api.themoviedb.org/3"


def tmdb_movie(tmdb_id, title=None, vote_average=7.0, vote_count=1000, genre_ids=None, **extra):
    """Raw TMDB list entry"""
    movie = {
        "id": tmdb_id,
        "title": title or f"Movie {tmdb_id}",
        "release_date": "2020-01-01",
        "overview": f"Overview of {tmdb_id}",
        "poster_path": f"/poster{tmdb_id}.jpg",
        "backdrop_path": f"/backdrop{tmdb_id}.jpg",
        "vote_average": vote_average,
        "vote_count": vote_count,
        "genre_ids": genre_ids or [],
        "popularity": 50.0,
    }
    movie.update(extra)
    return movie


def tmdb_page(movies, page=1):
    return {"page": page, "results": movies, "total_pages": 1, "total_results": len(movies)}


@pytest.fixture
def tmdb_routes():
    """
    Path (without the /3 prefix) -> JSON body, HTTP status code, or
    callable(request) returning either.
    """
    return {}


@pytest.fixture
def tmdb_requests():
    return []


@pytest.fixture
def tmdb_client(tmdb_routes, tmdb_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        tmdb_requests.append(request)
        path = request.url.path.removeprefix("/3")
        route = tmdb_routes.get(path, 404)
        if callable(route):
            route = route(request)
        if isinstance(route, int):
            return httpx.Response(route, json={"status_message": "error"})
        return httpx.Response(200, json=route)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=TMDB_BASE_URL)
    return TMDBClient(api_key="test-key", http_client=http_client)


@pytest.fixture
def mock_db_conn():
    conn = AsyncMock()
    conn.transaction = MagicMock()
    return conn


@pytest.fixture
def mock_db_pool(mock_db_conn):
    pool = AsyncMock()
    pool.fetch.return_value = []
    pool.fetchval.return_value = None
    # Mock connection context manager
    pool.acquire = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = mock_db_conn
    return pool


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "user-1"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(mock_db_pool, tmdb_client):
    # Override dependencies
    app.dependency_overrides[get_db_pool] = lambda: mock_db_pool
    app.dependency_overrides[get_catalog_client] = lambda: tmdb_client

    transport = ASGITransport(app=app)
    from movietrack.limiter import limiter
    limiter.enabled = False
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True

    app.dependency_overrides = {}
