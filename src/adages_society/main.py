# src/adages_society/main.py
"""Main entry point for the American Adages Society API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from adages_society.api.v1 import (
    adages_router,
    admin_router,
    appeals_router,
    auth_router,
    blog_router,
    challenges_router,
    citations_router,
    collections_router,
    comments_router,
    contact_router,
    documents_router,
    events_router,
    forum_router,
    friends_router,
    lore_router,
    mailing_list_router,
    notifications_router,
    rss_router,
    users_router,
    votes_router,
)
from adages_society.core.rate_limit import RateLimitCleanupWorker, get_rate_limiter
from adages_society.core.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = "Adages, commentary and community for the American Adages Society"

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description=DESCRIPTION,
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "error": "Validation failed", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(adages_router, prefix="/api/v1")
app.include_router(lore_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(challenges_router, prefix="/api/v1")
app.include_router(appeals_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(blog_router, prefix="/api/v1")
app.include_router(rss_router, prefix="/api/v1")
app.include_router(forum_router, prefix="/api/v1")
app.include_router(friends_router, prefix="/api/v1")
app.include_router(collections_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(citations_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(documents_router, prefix="/api/v1")
app.include_router(contact_router, prefix="/api/v1")
app.include_router(mailing_list_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    worker = RateLimitCleanupWorker(get_rate_limiter())
    await worker.start()
    app.state.rate_limit_worker = worker


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: RateLimitCleanupWorker | None = getattr(app.state, "rate_limit_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": DESCRIPTION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("adages_society.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
