from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

# key_func: client IP; storage: memory:// locally, redis:// when several workers share limits
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    default_limits=["100/minute"]
)
