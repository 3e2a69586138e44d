"""System endpoints for the P-LikeMe API."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from plikeme.api.v1.dependencies import SessionDep
from plikeme.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(db: SessionDep) -> dict[str, object]:
    """Report liveness and database connectivity.

    Returns:
        Dictionary with overall status, a human readable message, database state
        and the running version
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as exc:
        logger.warning("health check database probe failed: %s", exc)
        db_status = "unhealthy"

    return {
        "status": "ok" if db_status == "healthy" else "degraded",
        "message": "服务器运行正常" if db_status == "healthy" else "数据库不可用",
        "database": db_status,
        "version": settings.app_version,
    }
