"""
Create the rating-store tables and load a demo user.

    python -m movietrack.seed_data

Genre ids are TMDB genre ids so the recommendation service can query
/discover/movie with them directly.
"""
import asyncio
import logging

import asyncpg

from .config import settings
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS genres (
    id INTEGER PRIMARY KEY,
    name VARCHAR(100) NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS movies (
    id VARCHAR(50) PRIMARY KEY,
    tmdb_id INTEGER UNIQUE,
    title VARCHAR(255) NOT NULL,
    release_year INTEGER,
    plot TEXT,
    poster_url VARCHAR(500)
);

CREATE TABLE IF NOT EXISTS movie_genres (
    movie_id VARCHAR(50) REFERENCES movies(id) ON DELETE CASCADE,
    genre_id INTEGER REFERENCES genres(id) ON DELETE CASCADE,
    PRIMARY KEY (movie_id, genre_id)
);

CREATE TABLE IF NOT EXISTS user_ratings (
    user_id VARCHAR(100) NOT NULL,
    movie_id VARCHAR(50) REFERENCES movies(id) ON DELETE CASCADE,
    rating NUMERIC(3, 1) NOT NULL CHECK (rating >= 0 AND rating <= 10),
    created_at TIMESTAMP DEFAULT NOW(),
    PRIMARY KEY (user_id, movie_id)
);
"""

GENRES = {
    28: "Action",
    12: "Adventure",
    80: "Crime",
    18: "Drama",
    878: "Science Fiction",
    53: "Thriller",
}

MOVIES = [
    {"id": "m_dark_knight", "tmdb_id": 155, "title": "The Dark Knight", "year": 2008, "genres": [28, 80, 18]},
    {"id": "m_inception", "tmdb_id": 27205, "title": "Inception", "year": 2010, "genres": [28, 878, 12]},
    {"id": "m_matrix", "tmdb_id": 603, "title": "The Matrix", "year": 1999, "genres": [28, 878]},
    {"id": "m_shawshank", "tmdb_id": 278, "title": "The Shawshank Redemption", "year": 1994, "genres": [18, 80]},
    {"id": "m_fight_club", "tmdb_id": 550, "title": "Fight Club", "year": 1999, "genres": [18]},
]

DEMO_USER_ID = "demo-user"
DEMO_RATINGS = {
    "m_dark_knight": 9.0,
    "m_inception": 8.5,
    "m_matrix": 8.0,
    "m_fight_club": 5.0,
}


async def seed(conn):
    await conn.execute(SCHEMA)

    await conn.executemany(
        "INSERT INTO genres (id, name) VALUES ($1, $2) ON CONFLICT (id) DO NOTHING",
        list(GENRES.items()),
    )
    await conn.executemany(
        """
        INSERT INTO movies (id, tmdb_id, title, release_year)
        VALUES ($1, $2, $3, $4)
        ON CONFLICT (id) DO NOTHING
        """,
        [(m["id"], m["tmdb_id"], m["title"], m["year"]) for m in MOVIES],
    )
    await conn.executemany(
        "INSERT INTO movie_genres (movie_id, genre_id) VALUES ($1, $2) ON CONFLICT DO NOTHING",
        [(m["id"], genre_id) for m in MOVIES for genre_id in m["genres"]],
    )
    await conn.executemany(
        """
        INSERT INTO user_ratings (user_id, movie_id, rating)
        VALUES ($1, $2, $3)
        ON CONFLICT (user_id, movie_id) DO UPDATE SET rating = EXCLUDED.rating
        """,
        [(DEMO_USER_ID, movie_id, rating) for movie_id, rating in DEMO_RATINGS.items()],
    )

    logger.info("Seeded demo data", extra={"user_id": DEMO_USER_ID, "count": len(DEMO_RATINGS)})


async def main():
    setup_logging()
    conn = await asyncpg.connect(settings.DATABASE_URL)
    try:
        async with conn.transaction():
            await seed(conn)
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(main())
