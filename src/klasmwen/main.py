# src/klasmwen/main.py
"""Main entry point for the KlasMwen application."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from klasmwen.api.v1 import (
    auth_router,
    avatars_router,
    bookmarks_router,
    comments_router,
    notifications_router,
    posts_router,
    reactions_router,
    reports_router,
    search_router,
    tags_router,
    users_router,
)
from klasmwen.core.errors import AppError, classify
from klasmwen.core.logging import configure_logging
from klasmwen.core.settings import settings

configure_logging()

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Student social platform API: posts, threaded comments and moderation",
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


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    """Render any failure through the error classifier."""
    result = classify(exc)
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers=result.headers,
    )


# Specific types first; a handler keyed on Exception only runs after the
# server error middleware has already given up on the request.
for error_type in (
    AppError,
    RequestValidationError,
    PydanticValidationError,
    SQLAlchemyError,
    JWTError,
    StarletteHTTPException,
    Exception,
):
    app.add_exception_handler(error_type, handle_error)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(reactions_router, prefix="/api/v1")
app.include_router(bookmarks_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")
app.include_router(search_router, prefix="/api/v1")
app.include_router(avatars_router, prefix="/api/v1")


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
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("klasmwen.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
