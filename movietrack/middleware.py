import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id (client supplied or generated), time the request and
    log one line when it finishes.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "path": request.url.path, "method": request.method}

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**context, "duration_ms": _elapsed_ms(started), "error": str(e)},
                exc_info=True
            )
            raise

        duration_ms = _elapsed_ms(started)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)
        logger.info(
            "Request completed",
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms}
        )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
