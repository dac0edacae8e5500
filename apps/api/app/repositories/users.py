"""User directory helpers."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import new_id, utcnow
from ..models.user import User

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def get_by_id(session: AsyncSession, user_id: str) -> User | None:
    """Return a user by internal identifier."""

    return await session.get(User, user_id)


async def get_by_subject(session: AsyncSession, subject_id: str) -> User | None:
    """Return the user bound to an identity-provider subject."""

    stmt: Select[tuple[User]] = select(User).where(User.firebase_uid == subject_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_or_create_user(session: AsyncSession, *, subject_id: str, email: str | None) -> User:
    """Resolve a subject to its user, creating the row on first sight.

    The insert is ``ON CONFLICT DO NOTHING`` on the unique subject column, so two
    first requests racing for the same subject both end up reading one row.
    """

    user = await get_by_subject(session, subject_id)
    if user is None:
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS[dialect]
        now = utcnow()
        stmt = (
            insert(User)
            .values(
                id=new_id(),
                firebase_uid=subject_id,
                email=email or "",
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=[User.firebase_uid])
        )
        await session.execute(stmt)
        result = await session.execute(select(User).where(User.firebase_uid == subject_id))
        return result.scalar_one()

    if email and user.email != email:
        user.email = email
        user.updated_at = utcnow()
        session.add(user)
        await session.flush()
    return user


async def list_users(session: AsyncSession) -> list[User]:
    """Return all users ordered by email."""

    stmt = select(User).order_by(User.email.asc(), User.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())
