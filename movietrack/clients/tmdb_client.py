"""
Async client for The Movie Database (TMDB) v3 API.

One instance is created at startup and handed to whoever needs the catalog;
it owns its httpx.AsyncClient unless one is injected (tests do this with
httpx.MockTransport).
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import CatalogUnavailableError
from ..schemas.catalog import CatalogCandidate, CatalogPage, Credits, Genre, GenreId, MovieDetails

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"


def _to_candidate(raw: Dict[str, Any]) -> CatalogCandidate:
    return CatalogCandidate(
        external_id=raw["id"],
        title=raw.get("title") or raw.get("original_title") or "",
        release_date=raw.get("release_date") or None,
        overview=raw.get("overview") or "",
        poster_path=raw.get("poster_path"),
        backdrop_path=raw.get("backdrop_path"),
        vote_average=raw.get("vote_average") or 0.0,
        vote_count=raw.get("vote_count") or 0,
        genre_ids=raw.get("genre_ids") or [],
        popularity=raw.get("popularity"),
    )


def _to_page(payload: Dict[str, Any]) -> CatalogPage:
    return CatalogPage(
        page=payload.get("page") or 1,
        results=[_to_candidate(r) for r in payload.get("results") or []],
        total_pages=payload.get("total_pages") or 0,
        total_results=payload.get("total_results") or 0,
    )


class TMDBClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.image_base_url = image_base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, **params: Any) -> Dict[str, Any]:
        query = {"api_key": self.api_key}
        query.update({k: v for k, v in params.items() if v is not None})

        try:
            response = await self._client.get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("TMDB returned an error status", extra={"path": path, "status_code": e.response.status_code})
            raise CatalogUnavailableError(f"TMDB {path} returned {e.response.status_code}", e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("TMDB request failed", extra={"path": path, "error": str(e)})
            raise CatalogUnavailableError(f"TMDB {path} request failed: {e}") from e

        return response.json()

    # Listings

    async def search_movies(self, query: str, page: int = 1) -> CatalogPage:
        return _to_page(await self._get("/search/movie", query=query, page=page))

    async def list_popular(self, page: int = 1) -> CatalogPage:
        return _to_page(await self._get("/movie/popular", page=page))

    async def list_top_rated(self, page: int = 1) -> CatalogPage:
        return _to_page(await self._get("/movie/top_rated", page=page))

    async def list_now_playing(self, page: int = 1) -> CatalogPage:
        return _to_page(await self._get("/movie/now_playing", page=page))

    async def list_upcoming(self, page: int = 1) -> CatalogPage:
        return _to_page(await self._get("/movie/upcoming", page=page))

    async def discover_by_genre(self, genre_id: GenreId, page: int = 1) -> CatalogPage:
        return await self.discover_movies(with_genres=str(genre_id), page=page)

    async def discover_movies(self, **filters: Any) -> CatalogPage:
        """Filters are passed straight to /discover/movie (with_genres, sort_by, year, ...)."""
        return _to_page(await self._get("/discover/movie", **filters))

    # Single title / reference data

    async def get_movie_details(self, tmdb_id: int) -> MovieDetails:
        movie, credits = await asyncio.gather(
            self._get(f"/movie/{tmdb_id}"),
            self._get(f"/movie/{tmdb_id}/credits"),
        )
        base = _to_candidate(movie).model_dump()
        base["genre_ids"] = [g["id"] for g in movie.get("genres") or []]
        return MovieDetails(
            **base,
            genres=[Genre(**g) for g in movie.get("genres") or []],
            runtime=movie.get("runtime"),
            tagline=movie.get("tagline") or None,
            credits=Credits(cast=credits.get("cast") or [], crew=credits.get("crew") or []),
        )

    async def get_genres(self) -> List[Genre]:
        payload = await self._get("/genre/movie/list")
        return [Genre(**g) for g in payload.get("genres") or []]

    # Image URLs

    def poster_url(self, path: Optional[str], size: str = "w500") -> Optional[str]:
        if not path:
            return None
        return f"{self.image_base_url}/{size}{path}"

    def backdrop_url(self, path: Optional[str], size: str = "w1280") -> Optional[str]:
        if not path:
            return None
        return f"{self.image_base_url}/{size}{path}"
