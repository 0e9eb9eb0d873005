"""
Genre preferences derived from a user's rating history.

A genre's affinity is the average normalized rating (rating / 10) of the rated
movies carrying that genre, so a genre attached to many mediocre movies does not
outrank one attached to a few excellent ones.
"""
from typing import Dict, Iterable, List

from ..config import MAX_TOP_GENRES, TOP_GENRE_THRESHOLD
from ..schemas.catalog import GenreId
from ..schemas.recommendation import GenreAffinity, RatingRecord


class _GenreTotals:
    __slots__ = ("name", "weight_sum", "count")

    def __init__(self, name: str):
        self.name = name
        self.weight_sum = 0.0
        self.count = 0


def compute_affinities(ratings: Iterable[RatingRecord]) -> List[GenreAffinity]:
    """
    Rank genres by the user's average normalized rating.

    Ties keep the order in which genres were first seen.
    """
    totals: Dict[GenreId, _GenreTotals] = {}

    for rating in ratings:
        weight = rating.rating / 10
        for genre in rating.genres:
            bucket = totals.get(genre.id)
            if bucket is None:
                bucket = totals[genre.id] = _GenreTotals(genre.name)
            bucket.weight_sum += weight
            bucket.count += 1

    affinities = [
        GenreAffinity(genre_id=genre_id, genre_name=bucket.name, score=bucket.weight_sum / bucket.count)
        for genre_id, bucket in totals.items()
    ]
    # list.sort is stable
    affinities.sort(key=lambda a: a.score, reverse=True)
    return affinities


def select_top_genres(
    affinities: List[GenreAffinity],
    threshold: float = TOP_GENRE_THRESHOLD,
    max_genres: int = MAX_TOP_GENRES,
) -> List[GenreAffinity]:
    """Genres scoring at least `threshold` of the best score, best first."""
    if not affinities:
        return []

    max_score = max(a.score for a in affinities)
    return [a for a in affinities if a.score >= max_score * threshold][:max_genres]
