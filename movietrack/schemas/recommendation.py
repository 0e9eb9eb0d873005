from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

from .catalog import CatalogCandidate, ExternalId, Genre, GenreId


class RatingRecord(BaseModel):
    """A user's rating of one movie, with the genres of that movie"""
    movie_id: str
    user_id: str
    rating: float = Field(..., ge=0, le=10)
    genres: List[Genre] = Field(default_factory=list)
    external_id: Optional[ExternalId] = None  # catalog id of the rated movie

    model_config = {"frozen": True}

    @property
    def genre_ids(self) -> List[GenreId]:
        return [genre.id for genre in self.genres]

    @property
    def catalog_key(self) -> ExternalId:
        """Identity used to exclude this movie from catalog results"""
        return self.external_id if self.external_id is not None else self.movie_id


class GenreAffinity(BaseModel):
    genre_id: GenreId
    genre_name: str
    score: float = Field(..., ge=0, le=1)


class RecommendationItem(CatalogCandidate):
    """Single recommended movie: catalog fields plus scoring output"""
    recommendation_score: float
    recommendation_reason: Optional[str] = None


class RecommendationSource(str, Enum):
    PERSONALIZED = "personalized"
    POPULAR = "popular"


class RecommendationResponse(BaseModel):
    """API response for recommendations"""
    recommendations: List[RecommendationItem]
    message: str
