"""Validation, request shaping and orchestration for call log operations."""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InputValidationError, NotFoundError, store_errors
from ..models.call_log import CallPriority, CallStatus, CallType
from ..repositories import call_logs as call_logs_repo
from ..repositories import users as users_repo
from ..schemas import call_logs as schemas
from .auth import VerifiedIdentity

logger = logging.getLogger(__name__)

CALL_LOG_NOT_FOUND = "Call log not found"


def _choices(enum_cls: type[enum.Enum]) -> str:
    return ", ".join(member.value for member in enum_cls)


FIELD_MESSAGES: dict[str, str] = {
    "patient_name": "patient_name is required",
    "phone_number": "phone_number is required",
    "call_type": f"call_type must be one of: {_choices(CallType)}",
    "status": f"status must be one of: {_choices(CallStatus)}",
    "priority": f"priority must be one of: {_choices(CallPriority)}",
    "follow_up_needed": "follow_up_needed must be a boolean",
    "notes": "notes must be a string or null",
    "assigned_to": "assigned_to must be a user id or null",
    "follow_up_note": "follow_up_note must be a string or null",
}
UNKNOWN_ASSIGNEE = "assigned_to must reference an existing user"


def describe_validation_errors(exc: ValidationError) -> list[str]:
    """Turn pydantic errors into one message per offending field, in field order."""

    messages: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else ""
        message = FIELD_MESSAGES.get(field) or f"{field or 'body'}: {error.get('msg', 'invalid value')}"
        if message not in messages:
            messages.append(message)
    return messages


def _parse_positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def parse_page_params(
    page: str | None = None,
    limit: str | None = None,
    status: str | None = None,
    search: str | None = None,
) -> schemas.PageParams:
    """Normalise raw query-string values into listing parameters."""

    return schemas.PageParams(
        page=_parse_positive_int(page, schemas.DEFAULT_PAGE),
        limit=min(_parse_positive_int(limit, schemas.DEFAULT_LIMIT), schemas.MAX_LIMIT),
        status=status or None,
        search=search or None,
    )


def validate_create(data: Mapping[str, Any]) -> schemas.CallLogCreate:
    """Validate a create payload, reporting every problem at once."""

    try:
        return schemas.CallLogCreate.model_validate(dict(data))
    except ValidationError as exc:
        raise InputValidationError(details=describe_validation_errors(exc)) from exc


def validate_update(data: Mapping[str, Any]) -> schemas.CallLogUpdate:
    """Validate an update payload; the first problem becomes the headline message."""

    try:
        return schemas.CallLogUpdate.model_validate(dict(data))
    except ValidationError as exc:
        details = describe_validation_errors(exc)
        raise InputValidationError(details[0], details=details) from exc


async def _ensure_assignee_exists(session: AsyncSession, user_id: str | None, *, headline: str | None) -> None:
    if user_id is None:
        return
    if await users_repo.get_by_id(session, user_id) is None:
        raise InputValidationError(headline, details=[UNKNOWN_ASSIGNEE])


async def list_call_logs(params: schemas.PageParams, session: AsyncSession) -> schemas.PaginatedCallLogs:
    """Return a filtered page of call logs."""

    async with store_errors("Failed to fetch call logs"):
        # Count and page share one transaction and one predicate.
        async with session.begin():
            page = await call_logs_repo.list_call_logs(
                session,
                page=params.page,
                limit=params.limit,
                status=params.status,
                search=params.search,
            )

    return schemas.PaginatedCallLogs(
        data=[schemas.CallLogRead.model_validate(item) for item in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


async def get_call_log(call_log_id: str, session: AsyncSession) -> schemas.CallLogRead:
    async with store_errors("Failed to fetch call log"):
        async with session.begin():
            call_log = await call_logs_repo.get_by_id(session, call_log_id)

    if call_log is None:
        raise NotFoundError(CALL_LOG_NOT_FOUND)
    return schemas.CallLogRead.model_validate(call_log)


async def create_call_log(
    data: Mapping[str, Any],
    identity: VerifiedIdentity,
    session: AsyncSession,
) -> schemas.CallLogRead:
    """Validate input, resolve the creator and persist a new call log."""

    payload = validate_create(data)

    async with store_errors("Failed to create call log"):
        async with session.begin():
            await _ensure_assignee_exists(session, payload.assigned_to, headline=None)
            user = await users_repo.get_or_create_user(
                session, subject_id=identity.subject_id, email=identity.email
            )
            call_log = await call_logs_repo.create_call_log(
                session,
                created_by=user.id,
                **payload.model_dump(),
            )

    logger.info("Call log %s created by user %s", call_log.id, user.id)
    return schemas.CallLogRead.model_validate(call_log)


async def update_call_log(
    call_log_id: str,
    data: Mapping[str, Any],
    session: AsyncSession,
) -> schemas.CallLogRead:
    """Apply a sparse patch; a missing record wins over invalid input."""

    async with store_errors("Failed to update call log"):
        async with session.begin():
            if await call_logs_repo.get_by_id(session, call_log_id) is None:
                raise NotFoundError(CALL_LOG_NOT_FOUND)

            patch = validate_update(data)
            changes = patch.changes()
            if "assigned_to" in changes:
                await _ensure_assignee_exists(session, patch.assigned_to, headline=UNKNOWN_ASSIGNEE)

            call_log = await call_logs_repo.update_call_log(session, call_log_id, changes)

    if call_log is None:
        raise NotFoundError(CALL_LOG_NOT_FOUND)
    return schemas.CallLogRead.model_validate(call_log)


async def delete_call_log(call_log_id: str, session: AsyncSession) -> None:
    async with store_errors("Failed to delete call log"):
        async with session.begin():
            deleted = await call_logs_repo.delete_call_log(session, call_log_id)

    if not deleted:
        raise NotFoundError(CALL_LOG_NOT_FOUND)
    logger.info("Call log %s deleted", call_log_id)
