"""
=============================================================================
MovieTrack API
=============================================================================
Features:
  - Genre-affinity recommendations scored against the TMDB catalog
  - Popular-movie fallback whenever personalization is impossible or fails
  - TMDB catalog pass-through (search, listings, discover, genres, details)
  - Admin import of TMDB titles into the local catalog, single and bulk
  - JSON logging with request ids, rate limiting, JWT-protected user routes
=============================================================================
"""
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .dependencies import init_resources, close_resources
from .exceptions import (
    CatalogUnavailableError,
    MovieAlreadyImportedError,
    catalog_unavailable_handler,
    global_exception_handler,
    http_exception_handler,
    movie_already_imported_handler,
    validation_exception_handler,
)
from .limiter import limiter
from .logging_config import setup_logging
from .middleware import RequestTrackingMiddleware
from .routers import catalog_router, recommendation_router

API_VERSION = "1.0.0"

setup_logging()

app = FastAPI(
    title="MovieTrack API",
    description="Movie tracking backend: recommendations and TMDB catalog",
    version=API_VERSION
)

app.state.limiter = limiter

# applies the limiter default_limits to routes without their own @limiter.limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(CatalogUnavailableError, catalog_unavailable_handler)
app.add_exception_handler(MovieAlreadyImportedError, movie_already_imported_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(recommendation_router.router)
app.include_router(catalog_router.router)


@app.on_event("startup")
async def startup():
    await init_resources()


@app.on_event("shutdown")
async def shutdown():
    await close_resources()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
