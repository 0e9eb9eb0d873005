from typing import Optional
from asyncpg import Pool

from ..schemas.catalog import MovieDetails


def local_movie_id(tmdb_id: int) -> str:
    return f"tmdb_{tmdb_id}"


def release_year(release_date: Optional[str]) -> Optional[int]:
    # TMDB sends YYYY-MM-DD, or an empty string for unannounced titles
    if not release_date or not release_date[:4].isdigit():
        return None
    return int(release_date[:4])


class CatalogRepository:
    """Local copy of catalog titles, the rows user ratings point at."""

    def __init__(self, db: Pool):
        self.db = db

    async def find_movie_id_by_tmdb_id(self, tmdb_id: int) -> Optional[str]:
        return await self.db.fetchval("SELECT id FROM movies WHERE tmdb_id = $1", tmdb_id)

    async def insert_movie(self, details: MovieDetails, poster_url: Optional[str] = None) -> Optional[str]:
        """
        Insert a TMDB title and link its genres, all in one transaction.

        Returns the local movie id, or None when a row with this TMDB id
        already exists (nothing is written in that case).
        """
        async with self.db.acquire() as conn:
            async with conn.transaction():
                movie_id = await conn.fetchval(
                    """
                    INSERT INTO movies (id, tmdb_id, title, release_year, plot, poster_url)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    ON CONFLICT DO NOTHING
                    RETURNING id
                    """,
                    local_movie_id(details.external_id),
                    details.external_id,
                    details.title,
                    release_year(details.release_date),
                    details.overview or None,
                    poster_url,
                )
                if movie_id is None:
                    return None

                if details.genres:
                    await conn.executemany(
                        "INSERT INTO genres (id, name) VALUES ($1, $2) ON CONFLICT DO NOTHING",
                        [(g.id, g.name) for g in details.genres],
                    )
                    await conn.executemany(
                        "INSERT INTO movie_genres (movie_id, genre_id) VALUES ($1, $2) ON CONFLICT DO NOTHING",
                        [(movie_id, g.id) for g in details.genres],
                    )

        return movie_id
