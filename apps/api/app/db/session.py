"""Async engine, session factory and request-scoped session dependency."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    """Create the pooled engine shared by all requests."""

    connect_args: dict[str, object] = {}
    if config.database_ssl_required:
        connect_args["ssl"] = True

    return create_async_engine(
        config.database_async_url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""

    async with SessionLocal() as session:
        yield session


async def fetch_db_time(session: AsyncSession) -> datetime | str:
    """Round-trip to the database and return its clock reading."""

    result = await session.execute(select(func.current_timestamp()))
    return result.scalar_one()
