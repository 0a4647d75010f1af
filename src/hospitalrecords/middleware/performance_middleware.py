"""
Request logging middleware: one access line per request with its latency
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and latency for every request
    """

    def __init__(self, app, slow_request_ms: float = 1000.0):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - started) * 1000, 2)

        request_id = getattr(request.state, "request_id", "unknown")
        user_id = getattr(request.state, "user_id", None) or "anonymous"
        logger.info(
            f"{request.method} {request.url.path} status={response.status_code} "
            f"latency={latency_ms}ms user={user_id} request_id={request_id}"
        )

        response.headers["X-Process-Time"] = str(latency_ms)

        if latency_ms > self.slow_request_ms:
            logger.warning(
                f"SLOW_REQUEST: method={request.method} path={request.url.path} "
                f"latency={latency_ms}ms"
            )

        return response
