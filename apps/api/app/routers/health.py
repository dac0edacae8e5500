"""Liveness and database health probes."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import fetch_db_time, get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meta"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.head("/health")
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=status.HTTP_200_OK)


@router.get("/health/db")
async def health_db(session: AsyncSession = Depends(get_session)) -> JSONResponse:
    """Confirm the database answers a round trip."""

    try:
        db_time = await fetch_db_time(session)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": "Database connection failed"},
        )
    db_time_value = db_time.isoformat() if isinstance(db_time, datetime) else str(db_time)
    return JSONResponse(content={"status": "ok", "db_time": db_time_value})
