from fastapi import APIRouter, Depends, Query, Request

from ..config import DEFAULT_RECOMMENDATION_LIMIT, MAX_RECOMMENDATION_LIMIT
from ..schemas.recommendation import RecommendationResponse, RecommendationSource
from ..dependencies import get_db_pool, get_catalog_client, get_current_user_id
from ..repositories.rating_repository import RatingRepository
from ..services.recommendation_service import RecommendationService, RecommendationResult
from ..limiter import limiter

router = APIRouter()

PERSONALIZED_MESSAGE = "Recommendations based on your ratings"
POPULAR_MESSAGE = "Popular movies you might enjoy. Rate some movies to get personalized recommendations!"
EMPTY_MESSAGE = "No recommendations available right now"


async def get_recommendation_service(
    db = Depends(get_db_pool),
    catalog = Depends(get_catalog_client)
) -> RecommendationService:
    return RecommendationService(RatingRepository(db), catalog)


def build_message(result: RecommendationResult) -> str:
    if not result.recommendations:
        return EMPTY_MESSAGE
    if result.source == RecommendationSource.POPULAR:
        return POPULAR_MESSAGE
    return PERSONALIZED_MESSAGE


@router.get("/api/movies/recommendations", response_model=RecommendationResponse)
@limiter.limit("20/minute")
async def get_recommendations(
    request: Request, # Required for limiter
    limit: int = Query(DEFAULT_RECOMMENDATION_LIMIT, ge=0, le=MAX_RECOMMENDATION_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """
    Get personalized movie recommendations for the authenticated user
    """
    result = await service.recommend(user_id, limit)
    return RecommendationResponse(recommendations=result.recommendations, message=build_message(result))
