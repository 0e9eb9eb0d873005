import logging
import sys
import json
from typing import Any, Optional

from .config import settings

# Context keys callers pass through `extra=` that end up in the JSON line
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "movie_id",
    "tmdb_id",
    "genre_id",
    "path",
    "method",
    "status_code",
    "duration_ms",
    "source",
    "count",
    "error",
)


class JSONFormatter(logging.Formatter):
    """
    Render each LogRecord as a single JSON object.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def setup_logging(level: Optional[str] = None):
    """
    Send all application and uvicorn logs to stdout as JSON.
    """
    logger = logging.getLogger()
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    logger.handlers = []
    logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True

    # httpx logs every TMDB request at INFO, including the api_key query param
    logging.getLogger("httpx").setLevel(logging.WARNING)
