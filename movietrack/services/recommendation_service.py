import asyncio
import logging
from dataclasses import dataclass, field
from typing import Collection, List, Union

from ..config import CANDIDATES_PER_GENRE, DEFAULT_RECOMMENDATION_LIMIT
from ..schemas.catalog import ExternalId
from ..schemas.recommendation import GenreAffinity, RecommendationItem, RecommendationSource
from .interfaces import CatalogClient, RatingStore
from .preferences import compute_affinities, select_top_genres
from .scoring import dedup_by_external_id, rank_recommendations, score_candidate, to_recommendation

logger = logging.getLogger(__name__)

POPULAR_REASON = "Popular item you might enjoy"


def genre_reason(genre: GenreAffinity) -> str:
    return f"Recommended based on your interest in {genre.genre_name}"


@dataclass
class GenreFetchSuccess:
    genre: GenreAffinity
    candidates: List[RecommendationItem]


@dataclass
class GenreFetchFailure:
    genre: GenreAffinity
    error: Exception


GenreFetchOutcome = Union[GenreFetchSuccess, GenreFetchFailure]


@dataclass
class RecommendationResult:
    recommendations: List[RecommendationItem]
    source: RecommendationSource
    top_genres: List[GenreAffinity] = field(default_factory=list)


class RecommendationService:
    """
    Genre-affinity recommendations on top of the external catalog.

    Never raises to its caller: collaborator failures degrade to the popular
    listing, or to an empty list when the catalog itself is down.
    """

    def __init__(self, rating_store: RatingStore, catalog: CatalogClient):
        self.rating_store = rating_store
        self.catalog = catalog

    async def get_recommendations(
        self,
        user_id: str,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> List[RecommendationItem]:
        result = await self.recommend(user_id, limit)
        return result.recommendations

    async def recommend(self, user_id: str, limit: int = DEFAULT_RECOMMENDATION_LIMIT) -> RecommendationResult:
        """
        Strategy:
        1. No rating history -> popular listing
        2. Rank genres by affinity, keep the top ones
        3. Query the catalog per top genre (concurrently), drop already-rated titles
        4. Score, dedup, sort, truncate
        5. Nothing left, or anything unexpected -> popular listing
        """
        if limit <= 0:
            return RecommendationResult([], RecommendationSource.PERSONALIZED)

        try:
            ratings = await self.rating_store.list_ratings_for_user(user_id)
            if not ratings:
                logger.info("No rating history, serving popular movies", extra={"user_id": user_id})
                return await self._popular_result(limit)

            top_genres = select_top_genres(compute_affinities(ratings))
            rated_ids = {rating.catalog_key for rating in ratings}

            outcomes = await self._fetch_genre_candidates(top_genres, rated_ids)

            candidates: List[RecommendationItem] = []
            for outcome in outcomes:
                if isinstance(outcome, GenreFetchFailure):
                    logger.warning(
                        "Skipping genre after catalog error",
                        extra={"user_id": user_id, "genre_id": outcome.genre.genre_id, "error": str(outcome.error)}
                    )
                    continue
                candidates.extend(outcome.candidates)

            recommendations = rank_recommendations(candidates, limit)
            if not recommendations:
                logger.info(
                    "No genre candidates, serving popular movies",
                    extra={"user_id": user_id, "count": len(top_genres)}
                )
                return await self._popular_result(limit)

            logger.info(
                "Personalized recommendations built",
                extra={"user_id": user_id, "count": len(recommendations), "source": RecommendationSource.PERSONALIZED.value}
            )
            return RecommendationResult(recommendations, RecommendationSource.PERSONALIZED, top_genres)

        except Exception:
            logger.exception("Error generating recommendations, falling back to popular", extra={"user_id": user_id})
            return await self._popular_result(limit)

    async def get_popular_as_recommendations(self, limit: int) -> List[RecommendationItem]:
        """Popular catalog titles in catalog order, repeats dropped; empty list if the catalog is down."""
        if limit <= 0:
            return []

        try:
            page = await self.catalog.list_popular(page=1)
        except Exception:
            logger.exception("Error fetching popular movies from catalog")
            return []

        return [
            to_recommendation(candidate, score_candidate(candidate), POPULAR_REASON)
            for candidate in dedup_by_external_id(page.results)[:limit]
        ]

    async def _popular_result(self, limit: int) -> RecommendationResult:
        return RecommendationResult(
            await self.get_popular_as_recommendations(limit),
            RecommendationSource.POPULAR,
        )

    async def _fetch_genre_candidates(
        self,
        genres: List[GenreAffinity],
        rated_ids: Collection[ExternalId],
    ) -> List[GenreFetchOutcome]:
        # gather returns results in argument order, i.e. genre priority order
        return await asyncio.gather(*(self._fetch_genre(genre, rated_ids) for genre in genres))

    async def _fetch_genre(self, genre: GenreAffinity, rated_ids: Collection[ExternalId]) -> GenreFetchOutcome:
        # Must not raise: a raise inside gather would orphan the sibling fetches
        try:
            page = await self.catalog.discover_by_genre(genre.genre_id, page=1)
            fresh = [c for c in page.results if c.external_id not in rated_ids][:CANDIDATES_PER_GENRE]
            reason = genre_reason(genre)
            return GenreFetchSuccess(
                genre,
                [to_recommendation(c, score_candidate(c, genre), reason) for c in fresh],
            )
        except Exception as e:
            return GenreFetchFailure(genre, e)
