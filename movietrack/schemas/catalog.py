from pydantic import BaseModel, Field, PositiveInt
from typing import List, Optional, Union

# Catalog identifiers are opaque: TMDB uses ints, other stores may use strings
GenreId = Union[int, str]
ExternalId = Union[int, str]


class Genre(BaseModel):
    id: GenreId
    name: str


class CatalogCandidate(BaseModel):
    """A title as listed by the external catalog"""
    external_id: ExternalId
    title: str
    release_date: Optional[str] = None
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = Field(0.0, ge=0, le=10)
    vote_count: int = Field(0, ge=0)
    genre_ids: List[GenreId] = Field(default_factory=list)
    popularity: Optional[float] = None


class CatalogPage(BaseModel):
    """One page of a catalog listing"""
    page: int = 1
    results: List[CatalogCandidate] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class CastMember(BaseModel):
    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


class CrewMember(BaseModel):
    id: int
    name: str
    job: Optional[str] = None
    department: Optional[str] = None
    profile_path: Optional[str] = None


class Credits(BaseModel):
    cast: List[CastMember] = Field(default_factory=list)
    crew: List[CrewMember] = Field(default_factory=list)


class MovieDetails(CatalogCandidate):
    genres: List[Genre] = Field(default_factory=list)
    runtime: Optional[int] = None
    tagline: Optional[str] = None
    credits: Optional[Credits] = None


# API responses

class CatalogMovie(CatalogCandidate):
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None


class CatalogMovieDetail(MovieDetails):
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None


class CatalogSearchResponse(BaseModel):
    results: List[CatalogMovie]
    page: int
    total_pages: int
    total_results: int


class GenreListResponse(BaseModel):
    genres: List[Genre]


# Local catalog import

class ImportedMovie(BaseModel):
    movie_id: str
    tmdb_id: int
    title: str
    release_year: Optional[int] = None
    genres: List[Genre] = Field(default_factory=list)


class BulkImportRequest(BaseModel):
    tmdb_ids: List[PositiveInt] = Field(..., min_length=1, max_length=50)


class BulkImportReport(BaseModel):
    """Per-id outcome of a bulk import; one bad id never aborts the rest."""
    imported: List[int] = Field(default_factory=list)
    skipped: List[int] = Field(default_factory=list)
    failed: List[int] = Field(default_factory=list)
