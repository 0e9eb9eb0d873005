import pytest
from decimal import Decimal
from unittest.mock import AsyncMock

from movietrack.repositories.rating_repository import RatingRepository


def row(movie_id, rating, tmdb_id, genre_id=None, genre_name=None):
    return {
        "movie_id": movie_id,
        "user_id": "user1",
        "rating": rating,
        "tmdb_id": tmdb_id,
        "genre_id": genre_id,
        "genre_name": genre_name,
    }


@pytest.mark.asyncio
async def test_rows_are_folded_per_movie():
    # Arrange
    pool = AsyncMock()
    pool.fetch.return_value = [
        row("m_dark_knight", Decimal("9.0"), 155, 18, "Drama"),
        row("m_dark_knight", Decimal("9.0"), 155, 28, "Action"),
        row("m_dark_knight", Decimal("9.0"), 155, 80, "Crime"),
        row("m_matrix", Decimal("8.0"), 603, 28, "Action"),
        row("m_home_video", Decimal("4.5"), None),
    ]
    repo = RatingRepository(pool)

    # Act
    ratings = await repo.list_ratings_for_user("user1")

    # Assert
    assert [r.movie_id for r in ratings] == ["m_dark_knight", "m_matrix", "m_home_video"]
    assert ratings[0].rating == 9.0
    assert ratings[0].genre_ids == [18, 28, 80]
    assert ratings[0].external_id == 155
    assert ratings[1].genres[0].name == "Action"
    assert ratings[2].genres == []
    assert ratings[2].catalog_key == "m_home_video"

    query, user_id = pool.fetch.call_args.args
    assert "FROM user_ratings" in query
    assert user_id == "user1"


@pytest.mark.asyncio
async def test_no_ratings_returns_empty_list():
    pool = AsyncMock()
    pool.fetch.return_value = []

    assert await RatingRepository(pool).list_ratings_for_user("nobody") == []
