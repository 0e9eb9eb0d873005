from fastapi import APIRouter, Depends, Path, Query, Request, status

from ..clients.tmdb_client import TMDBClient
from ..dependencies import get_catalog_client, get_db_pool, require_admin
from ..limiter import limiter
from ..repositories.catalog_repository import CatalogRepository
from ..schemas.catalog import (
    BulkImportReport,
    BulkImportRequest,
    CatalogMovie,
    CatalogMovieDetail,
    CatalogPage,
    CatalogSearchResponse,
    GenreListResponse,
    ImportedMovie,
)
from ..services.import_service import CatalogImportService

router = APIRouter(prefix="/api/tmdb")


async def get_import_service(
    db=Depends(get_db_pool),
    catalog: TMDBClient = Depends(get_catalog_client)
) -> CatalogImportService:
    return CatalogImportService(catalog, CatalogRepository(db))


def _with_images(page: CatalogPage, catalog: TMDBClient) -> CatalogSearchResponse:
    return CatalogSearchResponse(
        results=[
            CatalogMovie(
                **movie.model_dump(),
                poster_url=catalog.poster_url(movie.poster_path),
                backdrop_url=catalog.backdrop_url(movie.backdrop_path),
            )
            for movie in page.results
        ],
        page=page.page,
        total_pages=page.total_pages,
        total_results=page.total_results,
    )


@router.get("/search", response_model=CatalogSearchResponse)
async def search_movies(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    """Search the movie catalog by title"""
    return _with_images(await catalog.search_movies(query, page), catalog)


@router.get("/popular", response_model=CatalogSearchResponse)
async def popular_movies(
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    return _with_images(await catalog.list_popular(page), catalog)


@router.get("/top-rated", response_model=CatalogSearchResponse)
async def top_rated_movies(
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    return _with_images(await catalog.list_top_rated(page), catalog)


@router.get("/now-playing", response_model=CatalogSearchResponse)
async def now_playing_movies(
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    return _with_images(await catalog.list_now_playing(page), catalog)


@router.get("/upcoming", response_model=CatalogSearchResponse)
async def upcoming_movies(
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    return _with_images(await catalog.list_upcoming(page), catalog)


@router.get("/discover/genre/{genre_id}", response_model=CatalogSearchResponse)
async def discover_by_genre(
    genre_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    """Catalog titles of one TMDB genre, most popular first"""
    return _with_images(await catalog.discover_by_genre(genre_id, page), catalog)


@router.get("/genres", response_model=GenreListResponse)
async def list_genres(catalog: TMDBClient = Depends(get_catalog_client)):
    return GenreListResponse(genres=await catalog.get_genres())


@router.get("/movies/{tmdb_id}", response_model=CatalogMovieDetail)
async def movie_details(
    tmdb_id: int = Path(..., ge=1),
    catalog: TMDBClient = Depends(get_catalog_client)
):
    """Full details and credits of a single catalog title"""
    details = await catalog.get_movie_details(tmdb_id)
    return CatalogMovieDetail(
        **details.model_dump(),
        poster_url=catalog.poster_url(details.poster_path),
        backdrop_url=catalog.backdrop_url(details.backdrop_path),
    )


@router.post("/import/{tmdb_id}", response_model=ImportedMovie, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def import_movie(
    request: Request,
    tmdb_id: int = Path(..., ge=1),
    admin_id: str = Depends(require_admin),
    service: CatalogImportService = Depends(get_import_service)
):
    """Copy a TMDB title and its genres into the local catalog (admin only)"""
    return await service.import_movie(tmdb_id)


@router.post("/import", response_model=BulkImportReport)
@limiter.limit("5/minute")
async def import_movies(
    request: Request,
    body: BulkImportRequest,
    admin_id: str = Depends(require_admin),
    service: CatalogImportService = Depends(get_import_service)
):
    """
    Import several TMDB titles. Ids already present are skipped, ids that
    fail are reported; neither stops the rest of the batch.
    """
    return await service.import_movies(body.tmdb_ids)
