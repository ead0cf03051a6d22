"""
FastAPI application for the DateKeeper reminder service.
Owns the database pool lifecycle and mounts the health and cron routers.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import db_pool
from app.features.reminders import reminders_router
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database pool on startup and close it on shutdown."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    logger.info("All services initialized successfully", services=["database_pool"])

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="DateKeeper Reminders",
    description="Recurring date reminders delivered by email",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(reminders_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
