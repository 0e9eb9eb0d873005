from typing import List, Protocol

from ..schemas.catalog import CatalogPage, GenreId
from ..schemas.recommendation import RatingRecord


class RatingStore(Protocol):
    async def list_ratings_for_user(self, user_id: str) -> List[RatingRecord]:
        """Every rating the user has made; empty list when there are none."""
        ...


class CatalogClient(Protocol):
    """Read side of the external movie catalog. Both calls may raise."""

    async def discover_by_genre(self, genre_id: GenreId, page: int = 1) -> CatalogPage:
        ...

    async def list_popular(self, page: int = 1) -> CatalogPage:
        ...
