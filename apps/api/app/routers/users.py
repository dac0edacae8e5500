"""User directory endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import store_errors
from ..db.session import get_session
from ..repositories import users as users_repo
from ..schemas.users import UserSummary
from ..services.auth import require_identity

router = APIRouter(dependencies=[Depends(require_identity)])


@router.get("", response_model=list[UserSummary])
async def list_users(session: AsyncSession = Depends(get_session)) -> list[UserSummary]:
    """Return every known user for the assignee picker."""

    async with store_errors("Failed to fetch users"):
        async with session.begin():
            users = await users_repo.list_users(session)
    return [UserSummary.model_validate(user) for user in users]
