from typing import Dict, List
from asyncpg import Pool

from ..schemas.catalog import Genre
from ..schemas.recommendation import RatingRecord


class RatingRepository:
    def __init__(self, db: Pool):
        self.db = db

    async def list_ratings_for_user(self, user_id: str) -> List[RatingRecord]:
        """
        One record per rated movie, highest rating first, each carrying the
        genres of the movie.
        """
        query = """
            SELECT
                r.movie_id,
                r.user_id,
                r.rating,
                m.tmdb_id,
                g.id AS genre_id,
                g.name AS genre_name
            FROM user_ratings r
            JOIN movies m ON m.id = r.movie_id
            LEFT JOIN movie_genres mg ON mg.movie_id = m.id
            LEFT JOIN genres g ON g.id = mg.genre_id
            WHERE r.user_id = $1
            ORDER BY r.rating DESC, r.movie_id, g.id
        """
        rows = await self.db.fetch(query, user_id)

        # joined rows -> one entry per movie, first-seen order
        grouped: Dict[str, dict] = {}
        for row in rows:
            row = dict(row)
            entry = grouped.setdefault(row['movie_id'], {
                "movie_id": row['movie_id'],
                "user_id": row['user_id'],
                "rating": float(row['rating']),
                "external_id": row['tmdb_id'],
                "genres": [],
            })
            if row['genre_id'] is not None:
                entry["genres"].append(Genre(id=row['genre_id'], name=row['genre_name']))

        return [RatingRecord(**entry) for entry in grouped.values()]
