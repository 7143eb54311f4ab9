"""
FastAPI application factory.

* Registers routes for locations, drivers, riders, rides, transfers,
  connections, messages, notifications, schedule and admin.
* Starts / stops the background webhook dispatcher via lifespan events.
* Maps the ``RideLinkError`` hierarchy to JSON error responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridelink.api.middleware import limiter
from ridelink.api.routes import (
    admin,
    connections,
    drivers,
    locations,
    messages,
    notifications,
    riders,
    rides,
    schedule,
    transfers,
)
from ridelink.config import settings
from ridelink.domain.exceptions import RideLinkError
from ridelink.workers import webhooks as _webhooks

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the webhook dispatcher on startup; stop on shutdown."""
    await _webhooks.start_dispatcher()
    yield
    await _webhooks.stop_dispatcher()


async def _ridelink_error_handler(request: Request, exc: RideLinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info(
            "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(
        title="RideLink API",
        description=(
            "Connects independent drivers with riders: driver availability, "
            "ride booking, assignment and driver-to-driver transfers, "
            "connections, messaging and scheduling."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Workflow errors
    app.add_exception_handler(RideLinkError, _ridelink_error_handler)

    # Routers
    for module in (
        locations,
        drivers,
        riders,
        rides,
        transfers,
        connections,
        messages,
        notifications,
        schedule,
        admin,
    ):
        app.include_router(module.router, prefix="/api/v1")

    return app
