from typing import Iterable, List, Optional, Set, TypeVar

from ..config import GENRE_MATCH_BONUS, POPULARITY_CAP, POPULARITY_VOTES_PER_POINT, QUALITY_WEIGHT
from ..schemas.catalog import CatalogCandidate, ExternalId
from ..schemas.recommendation import GenreAffinity, RecommendationItem

T = TypeVar("T", bound=CatalogCandidate)


def score_candidate(candidate: CatalogCandidate, source_genre: Optional[GenreAffinity] = None) -> float:
    """
    Composite score, at most 80:
      quality     (vote_average / 10) * 40
      popularity  vote_count / 100, capped at 20 (reached at 2000 votes)
      alignment   flat 20 when the candidate came from a preferred-genre query
    """
    quality = (candidate.vote_average / 10) * QUALITY_WEIGHT
    popularity = min(candidate.vote_count / POPULARITY_VOTES_PER_POINT, POPULARITY_CAP)
    # TODO: weight the bonus by source_genre.score once product signs off on proportional alignment
    alignment = GENRE_MATCH_BONUS if source_genre is not None else 0.0
    return quality + popularity + alignment


def to_recommendation(
    candidate: CatalogCandidate,
    score: float,
    reason: Optional[str] = None,
) -> RecommendationItem:
    return RecommendationItem(
        **candidate.model_dump(),
        recommendation_score=score,
        recommendation_reason=reason,
    )


def dedup_by_external_id(items: Iterable[T]) -> List[T]:
    """Keep the first occurrence of each external id, preserving order."""
    seen: Set[ExternalId] = set()
    unique = []
    for item in items:
        if item.external_id in seen:
            continue
        seen.add(item.external_id)
        unique.append(item)
    return unique


def rank_recommendations(items: Iterable[RecommendationItem], limit: int) -> List[RecommendationItem]:
    """Deduplicate, sort by score (stable, best first) and truncate to `limit`."""
    if limit <= 0:
        return []

    ranked = dedup_by_external_id(items)
    ranked.sort(key=lambda item: item.recommendation_score, reverse=True)
    return ranked[:limit]
