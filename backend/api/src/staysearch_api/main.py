"""FastAPI application for the hotel search REST API.

This package provides REST endpoints for:
- Health checks
- Hotel search with room inventory checks
- Hotel details and per-room availability
- Booking listing, lookup and cancellation
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from staysearch import __version__
from staysearch.config import get_settings
from staysearch.utils.logging import configure_logging
from staysearch_api.exceptions import register_exception_handlers
from staysearch_api.middleware.correlation import CorrelationIdMiddleware
from staysearch_api.routes.bookings import router as bookings_router
from staysearch_api.routes.health import router as health_router
from staysearch_api.routes.hotels import router as hotels_router

configure_logging(logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="StaySearch API",
    description="REST API for hotel search and booking management",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.include_router(health_router, prefix="/api")
app.include_router(hotels_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Root liveness endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "staysearch-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "staysearch_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["api/src", "shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
