from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class MovieTrackException(Exception):
    """Base exception for the application"""
    pass


class CatalogUnavailableError(MovieTrackException):
    """The external movie catalog (TMDB) could not answer a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MovieAlreadyImportedError(MovieTrackException):
    def __init__(self, tmdb_id: int):
        super().__init__(f"TMDB movie {tmdb_id} is already in the local catalog")
        self.tmdb_id = tmdb_id


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


async def global_exception_handler(request: Request, exc: Exception):
    """
    Last-resort handler: 500 with no internal details.
    """
    request_id = _request_id(request)

    logger.error(
        "Unhandled exception occurred",
        extra={"request_id": request_id, "path": request.url.path},
        exc_info=exc
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": request_id
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    request_id = _request_id(request)

    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} error", extra={"request_id": request_id, "error": exc.detail})
    else:
        logger.info(f"HTTP {exc.status_code} error", extra={"request_id": request_id, "error": exc.detail})

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "request_id": request_id},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = _request_id(request)
    logger.info("Validation error", extra={"request_id": request_id, "error": str(exc.errors())})

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "details": jsonable_errors(exc),
            "request_id": request_id
        },
    )


async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
    """
    Catalog pass-through endpoints surface TMDB outages as 502, and titles
    TMDB does not know as 404.
    """
    request_id = _request_id(request)

    if exc.status_code == 404:
        logger.info("Title not found in movie catalog", extra={"request_id": request_id, "path": request.url.path})
        return JSONResponse(
            status_code=404,
            content={"error": "Movie not found in catalog", "request_id": request_id},
        )

    logger.warning(
        "Movie catalog unavailable",
        extra={"request_id": request_id, "path": request.url.path, "error": str(exc)}
    )

    return JSONResponse(
        status_code=502,
        content={
            "error": "Movie catalog unavailable",
            "message": "The movie database could not be reached. Please try again later.",
            "request_id": request_id
        },
    )


async def movie_already_imported_handler(request: Request, exc: MovieAlreadyImportedError):
    request_id = _request_id(request)
    logger.info("Import rejected, movie already exists", extra={"request_id": request_id, "tmdb_id": exc.tmdb_id})

    return JSONResponse(
        status_code=409,
        content={
            "error": "Movie already exists in database",
            "tmdb_id": exc.tmdb_id,
            "request_id": request_id
        },
    )


def jsonable_errors(exc: RequestValidationError):
    # pydantic v2 may put exception objects in "ctx"
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors
