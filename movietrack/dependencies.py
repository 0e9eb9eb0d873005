import logging
from typing import Any, Dict, Optional

import asyncpg
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from .clients.tmdb_client import TMDBClient
from .config import settings
from .core.security import decode_access_token

logger = logging.getLogger(__name__)


# Process-wide resources, created on startup and injected per request
class AppState:
    pg_pool: Optional[asyncpg.Pool] = None
    catalog_client: Optional[TMDBClient] = None


state = AppState()


async def init_resources():
    """Initialize all resources"""
    state.pg_pool = await asyncpg.create_pool(
        settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=60
    )

    if not settings.TMDB_API_KEY:
        logger.warning("TMDB_API_KEY is not set, catalog requests will be rejected")
    state.catalog_client = TMDBClient(
        api_key=settings.TMDB_API_KEY,
        base_url=settings.TMDB_BASE_URL,
        image_base_url=settings.TMDB_IMAGE_BASE_URL,
        timeout=settings.TMDB_TIMEOUT_SECONDS,
    )
    logger.info("All resources initialized")


async def close_resources():
    """Close all resources"""
    if state.catalog_client:
        await state.catalog_client.aclose()
        state.catalog_client = None
    if state.pg_pool:
        await state.pg_pool.close()
        state.pg_pool = None
    logger.info("All resources closed")


# Dependencies
async def get_db_pool() -> asyncpg.Pool:
    return state.pg_pool


async def get_catalog_client() -> TMDBClient:
    return state.catalog_client


# Auth Dependencies
# Tokens are issued by the auth service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    try:
        return decode_access_token(token)
    except JWTError:
        raise _credentials_exception()


async def get_current_user_id(payload: Dict[str, Any] = Depends(get_token_payload)) -> str:
    user_id = payload.get("sub")
    if not user_id:
        raise _credentials_exception()
    return str(user_id)


async def require_admin(
    payload: Dict[str, Any] = Depends(get_token_payload),
    user_id: str = Depends(get_current_user_id),
) -> str:
    """Admin routes need a `role: admin` claim on top of a valid token."""
    if payload.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return user_id
