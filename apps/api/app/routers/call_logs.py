"""Call log CRUD endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InputValidationError
from ..db.session import get_session
from ..schemas import call_logs as schemas
from ..services import call_logs as call_logs_service
from ..services.auth import VerifiedIdentity, require_identity

router = APIRouter(dependencies=[Depends(require_identity)])

BODY_NOT_OBJECT = "body must be a JSON object"


async def _read_json_object(request: Request) -> dict[str, Any]:
    # Runs after the router-level bearer dependency.
    try:
        body = await request.json()
    except ValueError as exc:
        raise InputValidationError(details=[BODY_NOT_OBJECT]) from exc
    if not isinstance(body, dict):
        raise InputValidationError(details=[BODY_NOT_OBJECT])
    return body


@router.get("", response_model=schemas.PaginatedCallLogs)
async def list_call_logs(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> schemas.PaginatedCallLogs:
    """Return a filtered, paginated list of call logs, newest first."""

    params = call_logs_service.parse_page_params(page, limit, status_filter, search)
    return await call_logs_service.list_call_logs(params, session)


@router.get("/{call_log_id}", response_model=schemas.CallLogRead)
async def get_call_log(
    call_log_id: str,
    session: AsyncSession = Depends(get_session),
) -> schemas.CallLogRead:
    return await call_logs_service.get_call_log(call_log_id, session)


@router.post("", response_model=schemas.CallLogRead, status_code=status.HTTP_201_CREATED)
async def create_call_log(
    request: Request,
    identity: VerifiedIdentity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
) -> schemas.CallLogRead:
    """Create a call log owned by the authenticated user."""

    payload = await _read_json_object(request)
    return await call_logs_service.create_call_log(payload, identity, session)


@router.put("/{call_log_id}", response_model=schemas.CallLogRead)
async def update_call_log(
    call_log_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> schemas.CallLogRead:
    """Apply only the fields present in the body."""

    payload = await _read_json_object(request)
    return await call_logs_service.update_call_log(call_log_id, payload, session)


@router.delete("/{call_log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_call_log(
    call_log_id: str,
    session: AsyncSession = Depends(get_session),
) -> Response:
    await call_logs_service.delete_call_log(call_log_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
