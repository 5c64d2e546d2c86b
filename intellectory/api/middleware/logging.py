"""
Request logging middleware.

Every request gets a short id that is echoed in `X-Request-ID` and bound
to the structlog context; the session dependency adds the user and team
ids. Health checks are logged at debug level.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from intellectory.config import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

QUIET_PATHS = ("/health", "/api/health")


def _is_health_check(path: str) -> bool:
    return path == QUIET_PATHS[0] or path.startswith(QUIET_PATHS[1])


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one start and one outcome event per request, with timing headers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        path = request.url.path
        log = logger.debug if _is_health_check(path) else logger.info

        clear_request_context()
        bind_request_context(request_id=request_id)
        started = time.perf_counter()

        log("request_started", method=request.method, path=path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=path,
                error=str(e),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            clear_request_context()
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        log(
            "request_completed",
            method=request.method,
            path=path,
            status=response.status_code,
            duration_ms=round(elapsed_ms, 2),
        )
        clear_request_context()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response
