"""Per-request correlation IDs and access logging.

The incoming X-Correlation-ID is kept (or a new one generated), bound for
the whole request, echoed on the response, and stamped on the single
access line logged when the response is ready.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from staysearch.utils.logging import correlation_scope, get_logger

CORRELATION_ID_HEADER = "X-Correlation-ID"

logger = get_logger("staysearch_api.access")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and log its outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as correlation_id:
            started = time.perf_counter()
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            logger.info(
                "%s %s -> %d in %dms",
                request.method,
                request.url.path,
                response.status_code,
                round((time.perf_counter() - started) * 1000),
            )
            return response
