"""Request tracing middleware.

Every request gets a correlation ID, taken from the ``X-Correlation-ID``
header when the caller sends one. The ID is bound into the logging context
for the lifetime of the request and returned on the response.
"""

import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cortex.observability.logging import clear_log_context, get_logger, set_correlation_id

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and log its outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        clear_log_context()
        set_correlation_id(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_log_context()
