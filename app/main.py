from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request

from app.api import api_router
from app.config import settings
from app.db import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("eventadmin")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    init_db()
    logger.info("Database initialized (blob backend: %s)", settings.blob_backend)
    yield
    logger.info("Shutting down")


app = FastAPI(title="Event Admin Backend", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "Event admin backend is running"}
