"""
FastAPI application entry point

Run with: uvicorn airbooking.main:create_app --factory
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded

from airbooking.api import bookings, catalog, flights, seats
from airbooking.core.config import Settings, get_settings
from airbooking.core.database import Database
from airbooking.core.logging_config import setup_logging
from airbooking.core.metrics import CONTENT_TYPE_LATEST, get_metrics
from airbooking.core.redis import RedisClient
from airbooking.middleware.rate_limiter import build_limiter
from airbooking.middleware.tracing import TracingMiddleware
from airbooking.services.notifier import ReceiptNotifier, build_notifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    logger.info(f"Starting {settings.APP_NAME} ({database.dialect})")

    try:
        await database.ping()
        logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    if settings.AUTO_CREATE_TABLES:
        await database.create_all()

    await app.state.redis.connect()

    yield

    logger.info("Shutting down...")
    await app.state.redis.close()
    await database.dispose()
    logger.info("Cleanup complete")


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[ReceiptNotifier] = None,
) -> FastAPI:
    """
    Build the application and its collaborators.

    State is attached immediately so the app also works without lifespan
    events (tests drive it through ASGITransport).
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Airline seat inventory and booking service",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.notifier = notifier or build_notifier(settings)
    app.state.redis = RedisClient(settings.REDIS_URL, default_ttl=settings.IDEMPOTENCY_TTL_SECONDS)

    app.state.limiter = build_limiter(settings)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {request.url.path}")
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": "Too many requests. Please slow down.",
                "detail": str(exc.detail),
            },
            headers={"Retry-After": "60"},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TracingMiddleware)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "redis": "healthy" if app.state.redis.connected else "unavailable",
        }

    @app.get("/metrics", tags=["Health"])
    async def metrics():
        return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(catalog.router, prefix="/api/v1", tags=["Catalog"])
    app.include_router(seats.router, prefix="/api/v1", tags=["Seats"])
    app.include_router(flights.router, prefix="/api/v1", tags=["Flights"])
    app.include_router(bookings.router, prefix="/api/v1", tags=["Bookings"])

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "airbooking.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
