"""Main FastAPI application for GitHub PR Review Commenter."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from github_pr_review_commenter import __version__
from github_pr_review_commenter.api.routes import router as api_router
from github_pr_review_commenter.config import get_settings
from github_pr_review_commenter.markers import COMMENT_MARKERS
from github_pr_review_commenter.utils import get_logger

logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    logger.info("Starting GitHub PR Review Commenter API")
    logger.info(
        "Comment style=%s, inline severity=%s, bot marker=%s",
        settings.comment_style,
        settings.inline_severity,
        COMMENT_MARKERS.bot_identifier,
    )
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; publishing endpoints will fail on private repositories")

    yield

    logger.info("Shutting down GitHub PR Review Commenter API")


app = FastAPI(
    title="GitHub PR Review Commenter",
    description="Places AI review findings on pull request diffs and keeps the posted comments in sync across runs",
    version=__version__,
    lifespan=lifespan,
    docs_url=settings.docs_url,
    redoc_url=settings.redoc_url,
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__,
        "service": "GitHub PR Review Commenter",
    }


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(404)
async def not_found_handler(_request: Request, _exc: Exception) -> JSONResponse:
    """404 error handler for non-HTTP exceptions."""
    return JSONResponse(
        status_code=404,
        content={"detail": "Not found"},
    )


@app.exception_handler(500)
async def internal_error_handler(_request: Request, _exc: Exception) -> JSONResponse:
    """500 error handler."""
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    uvicorn.run(
        "github_pr_review_commenter.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
