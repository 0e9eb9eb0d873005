import logging
from typing import Iterable

import asyncpg

from ..clients.tmdb_client import TMDBClient
from ..exceptions import CatalogUnavailableError, MovieAlreadyImportedError
from ..repositories.catalog_repository import CatalogRepository, release_year
from ..schemas.catalog import BulkImportReport, ImportedMovie

logger = logging.getLogger(__name__)


class CatalogImportService:
    """
    Copies TMDB titles into the local catalog so users can rate them.

    Single imports raise (409 / 404 / 502 at the API); bulk imports never
    raise for a bad id and report it instead.
    """

    def __init__(self, catalog: TMDBClient, repository: CatalogRepository):
        self.catalog = catalog
        self.repository = repository

    async def import_movie(self, tmdb_id: int) -> ImportedMovie:
        if await self.repository.find_movie_id_by_tmdb_id(tmdb_id) is not None:
            raise MovieAlreadyImportedError(tmdb_id)

        details = await self.catalog.get_movie_details(tmdb_id)
        movie_id = await self.repository.insert_movie(details, self.catalog.poster_url(details.poster_path))
        if movie_id is None:
            # a concurrent import won the insert
            raise MovieAlreadyImportedError(tmdb_id)

        logger.info("Movie imported from catalog", extra={"movie_id": movie_id, "tmdb_id": tmdb_id})
        return ImportedMovie(
            movie_id=movie_id,
            tmdb_id=tmdb_id,
            title=details.title,
            release_year=release_year(details.release_date),
            genres=details.genres,
        )

    async def import_movies(self, tmdb_ids: Iterable[int]) -> BulkImportReport:
        report = BulkImportReport()

        # one id at a time keeps TMDB request volume flat
        for tmdb_id in dict.fromkeys(tmdb_ids):
            try:
                await self.import_movie(tmdb_id)
            except MovieAlreadyImportedError:
                report.skipped.append(tmdb_id)
            except (CatalogUnavailableError, asyncpg.PostgresError) as e:
                logger.warning("Movie import failed", extra={"tmdb_id": tmdb_id, "error": str(e)})
                report.failed.append(tmdb_id)
            else:
                report.imported.append(tmdb_id)

        logger.info(
            f"Bulk import finished: {len(report.imported)} imported, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report
