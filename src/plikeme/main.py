# src/plikeme/main.py
"""Main entry point for the P-LikeMe application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from plikeme.api.v1 import (
    auth_router,
    communities_router,
    gurus_router,
    replies_router,
    system_router,
    threads_router,
    users_router,
)
from plikeme.core.settings import settings
from plikeme.db.session import SessionLocal
from plikeme.schemas import ErrorResponse
from plikeme.scripts.migrate import run_upgrade_head
from plikeme.scripts.seed import seed_communities

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "服务器内部错误"

# Initialize FastAPI app
app = FastAPI(
    title="P-LikeMe API",
    description="Disease community matching API",
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

# Include API routers
app.include_router(system_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(communities_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(threads_router, prefix="/api")
app.include_router(replies_router, prefix="/api")
app.include_router(gurus_router, prefix="/api")


def _error_body(detail: Any) -> dict[str, Any]:
    if isinstance(detail, dict):
        body = ErrorResponse(**detail)
    else:
        body = ErrorResponse(error=str(detail))
    return body.model_dump(exclude_none=True)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 with the first message up front."""
    errors = exc.errors()
    first = errors[0].get("msg", "请求参数错误") if errors else "请求参数错误"
    first = first.removeprefix("Value error, ")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=first,
            errors=jsonable_encoder(errors, custom_encoder={Exception: str}),
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=INTERNAL_ERROR).model_dump(exclude_none=True),
    )


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_migrate:
        logger.info("Applying database migrations")
        run_upgrade_head()
    if settings.seed_on_startup:
        with SessionLocal() as db:
            created = seed_communities(db)
        if created:
            logger.info("Seeded %d communities", created)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "P-LikeMe API",
        "version": settings.app_version,
        "description": "Disease community matching API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("plikeme.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
