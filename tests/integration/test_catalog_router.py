import pytest
from httpx import AsyncClient

from conftest import tmdb_movie, tmdb_page
from movietrack.limiter import limiter


@pytest.mark.asyncio
async def test_search_adds_image_urls(client: AsyncClient, tmdb_routes):
    tmdb_routes["/search/movie"] = tmdb_page([tmdb_movie(603, "The Matrix")])

    response = await client.get("/api/tmdb/search", params={"query": "matrix"})

    assert response.status_code == 200
    data = response.json()
    assert data["total_results"] == 1
    movie = data["results"][0]
    assert movie["title"] == "The Matrix"
    assert movie["poster_url"] == "https://image.tmdb.org/t/p/w500/poster603.jpg"
    assert movie["backdrop_url"] == "https://image.tmdb.org/t/p/w1280/backdrop603.jpg"


@pytest.mark.asyncio
async def test_search_requires_query(client: AsyncClient):
    response = await client.get("/api/tmdb/search")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_popular(client: AsyncClient, tmdb_routes, tmdb_requests):
    tmdb_routes["/movie/popular"] = tmdb_page([tmdb_movie(1), tmdb_movie(2)], page=3)

    response = await client.get("/api/tmdb/popular", params={"page": 3})

    assert response.status_code == 200
    assert response.json()["page"] == 3
    assert tmdb_requests[0].url.params["page"] == "3"


@pytest.mark.asyncio
async def test_catalog_outage_returns_502(client: AsyncClient, tmdb_routes):
    tmdb_routes["/movie/popular"] = 500

    response = await client.get("/api/tmdb/popular")

    assert response.status_code == 502
    assert response.json()["error"] == "Movie catalog unavailable"
    assert "request_id" in response.json()


@pytest.mark.asyncio
async def test_genres(client: AsyncClient, tmdb_routes):
    tmdb_routes["/genre/movie/list"] = {"genres": [{"id": 28, "name": "Action"}]}

    response = await client.get("/api/tmdb/genres")

    assert response.json() == {"genres": [{"id": 28, "name": "Action"}]}


@pytest.mark.asyncio
async def test_movie_details(client: AsyncClient, tmdb_routes):
    tmdb_routes["/movie/603"] = tmdb_movie(603, "The Matrix", genres=[{"id": 28, "name": "Action"}], runtime=136)
    tmdb_routes["/movie/603/credits"] = {"cast": [], "crew": []}

    response = await client.get("/api/tmdb/movies/603")

    assert response.status_code == 200
    data = response.json()
    assert data["runtime"] == 136
    assert data["genres"] == [{"id": 28, "name": "Action"}]
    assert data["poster_url"].endswith("/poster603.jpg")


@pytest.mark.asyncio
async def test_health_and_request_id(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
@pytest.mark.parametrize("url, tmdb_path", [
    ("/api/tmdb/top-rated", "/movie/top_rated"),
    ("/api/tmdb/now-playing", "/movie/now_playing"),
    ("/api/tmdb/upcoming", "/movie/upcoming"),
])
async def test_listings(client: AsyncClient, tmdb_routes, tmdb_requests, url, tmdb_path):
    tmdb_routes[tmdb_path] = tmdb_page([tmdb_movie(11), tmdb_movie(12)], page=2)

    response = await client.get(url, params={"page": 2})

    assert response.status_code == 200
    data = response.json()
    assert [m["external_id"] for m in data["results"]] == [11, 12]
    assert data["results"][0]["poster_url"].endswith("/poster11.jpg")
    assert tmdb_requests[0].url.params["page"] == "2"


@pytest.mark.asyncio
async def test_discover_by_genre(client: AsyncClient, tmdb_routes, tmdb_requests):
    tmdb_routes["/discover/movie"] = tmdb_page([tmdb_movie(603, genre_ids=[28])])

    response = await client.get("/api/tmdb/discover/genre/28")

    assert response.status_code == 200
    assert response.json()["results"][0]["genre_ids"] == [28]
    assert response.json()["results"][0]["backdrop_url"].endswith("/backdrop603.jpg")
    assert tmdb_requests[0].url.params["with_genres"] == "28"


@pytest.mark.asyncio
async def test_discover_rejects_invalid_genre(client: AsyncClient):
    response = await client.get("/api/tmdb/discover/genre/0")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_title_returns_404(client: AsyncClient):
    response = await client.get("/api/tmdb/movies/999999")

    assert response.status_code == 404
    assert response.json()["error"] == "Movie not found in catalog"


@pytest.mark.asyncio
async def test_import_requires_admin(client: AsyncClient, auth_headers):
    assert (await client.post("/api/tmdb/import/603")).status_code == 401

    response = await client.post("/api/tmdb/import/603", headers=auth_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_import_movie(client: AsyncClient, admin_headers, tmdb_routes, mock_db_conn):
    tmdb_routes["/movie/603"] = tmdb_movie(603, "The Matrix", release_date="1999-03-30",
                                           genres=[{"id": 28, "name": "Action"}])
    tmdb_routes["/movie/603/credits"] = {"cast": [], "crew": []}
    mock_db_conn.fetchval.return_value = "tmdb_603"

    response = await client.post("/api/tmdb/import/603", headers=admin_headers)

    assert response.status_code == 201
    assert response.json() == {
        "movie_id": "tmdb_603",
        "tmdb_id": 603,
        "title": "The Matrix",
        "release_year": 1999,
        "genres": [{"id": 28, "name": "Action"}],
    }
    assert mock_db_conn.executemany.call_count == 2


@pytest.mark.asyncio
async def test_import_existing_movie_conflicts(client: AsyncClient, admin_headers, mock_db_pool, tmdb_requests):
    mock_db_pool.fetchval.return_value = "m_matrix"

    response = await client.post("/api/tmdb/import/603", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["tmdb_id"] == 603
    assert tmdb_requests == []


@pytest.mark.asyncio
async def test_bulk_import_reports_each_id(client: AsyncClient, admin_headers, tmdb_routes, mock_db_pool, mock_db_conn):
    # Arrange
    for tmdb_id in (603, 155):
        tmdb_routes[f"/movie/{tmdb_id}"] = tmdb_movie(tmdb_id, genres=[{"id": 28, "name": "Action"}])
        tmdb_routes[f"/movie/{tmdb_id}/credits"] = {"cast": [], "crew": []}
    # 404 for 999999 comes from the default route
    mock_db_pool.fetchval.side_effect = lambda query, tmdb_id: "m_dark_knight" if tmdb_id == 155 else None
    mock_db_conn.fetchval.return_value = "tmdb_603"

    # Act
    response = await client.post(
        "/api/tmdb/import",
        json={"tmdb_ids": [603, 155, 999999]},
        headers=admin_headers,
    )

    # Assert
    assert response.status_code == 200
    assert response.json() == {"imported": [603], "skipped": [155], "failed": [999999]}


@pytest.mark.asyncio
async def test_bulk_import_validates_body(client: AsyncClient, admin_headers):
    response = await client.post("/api/tmdb/import", json={"tmdb_ids": []}, headers=admin_headers)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_default_rate_limit_applies_to_undecorated_routes(client: AsyncClient):
    limiter.reset()
    limiter.enabled = True
    try:
        statuses = [(await client.get("/health")).status_code for _ in range(101)]
    finally:
        limiter.enabled = False
        limiter.reset()

    assert statuses[:100] == [200] * 100
    assert statuses[100] == 429
