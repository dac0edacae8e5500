"""Data access helpers for call logs."""
from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.call_log import CallLog, CallPriority, CallStatus, CallType

STATUS_FILTER_ALL = "all"
# Largest OFFSET the database accepts (signed 64-bit).
MAX_OFFSET = 2**63 - 1

UPDATABLE_FIELDS = frozenset(
    {
        "patient_name",
        "phone_number",
        "call_type",
        "status",
        "priority",
        "notes",
        "assigned_to",
        "follow_up_needed",
        "follow_up_note",
    }
)


@dataclass(slots=True)
class CallLogPage:
    """One window of a filtered, ordered call log listing."""

    items: list[CallLog]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def _filters(status: str | None, search: str | None) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if status and status != STATUS_FILTER_ALL:
        conditions.append(CallLog.status == status)
    if search:
        conditions.append(
            or_(
                CallLog.patient_name.icontains(search, autoescape=True),
                CallLog.phone_number.icontains(search, autoescape=True),
            )
        )
    return conditions


async def list_call_logs(
    session: AsyncSession,
    *,
    page: int,
    limit: int,
    status: str | None = None,
    search: str | None = None,
) -> CallLogPage:
    """Return one page of call logs, newest first, with the matching total.

    ``page`` and ``limit`` are expected to be normalised already (both >= 1).
    """

    conditions = _filters(status, search)
    where = and_(*conditions) if conditions else None

    count_stmt: Select[tuple[int]] = select(func.count(CallLog.id))
    data_stmt: Select[tuple[CallLog]] = select(CallLog)
    if where is not None:
        count_stmt = count_stmt.where(where)
        data_stmt = data_stmt.where(where)

    offset = (page - 1) * limit
    total = (await session.execute(count_stmt)).scalar_one()
    if offset > MAX_OFFSET:
        return CallLogPage(items=[], total=total, page=page, limit=limit)

    data_stmt = (
        data_stmt.order_by(CallLog.created_at.desc(), CallLog.id.desc())
        .limit(limit)
        .offset(offset)
    )
    items = list((await session.execute(data_stmt)).scalars().all())
    return CallLogPage(items=items, total=total, page=page, limit=limit)


async def get_by_id(session: AsyncSession, call_log_id: str) -> CallLog | None:
    """Return a call log by identifier."""

    return await session.get(CallLog, call_log_id)


async def create_call_log(
    session: AsyncSession,
    *,
    created_by: str,
    patient_name: str,
    phone_number: str,
    call_type: CallType,
    status: CallStatus = CallStatus.NEW,
    priority: CallPriority = CallPriority.MEDIUM,
    notes: str | None = None,
    assigned_to: str | None = None,
    follow_up_needed: bool = False,
    follow_up_note: str | None = None,
) -> CallLog:
    """Persist a new call log and return it with generated fields populated."""

    now = utcnow()
    call_log = CallLog(
        patient_name=patient_name,
        phone_number=phone_number,
        call_type=call_type,
        status=status,
        priority=priority,
        notes=notes,
        assigned_to=assigned_to,
        follow_up_needed=follow_up_needed,
        follow_up_note=follow_up_note,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    session.add(call_log)
    await session.flush()
    return call_log


async def update_call_log(
    session: AsyncSession,
    call_log_id: str,
    changes: Mapping[str, object],
) -> CallLog | None:
    """Apply a sparse patch to a call log.

    Keys outside ``UPDATABLE_FIELDS`` are ignored. ``updated_at`` moves only when
    a value actually changes, so an empty or no-op patch returns the record as is.
    """

    call_log = await session.get(CallLog, call_log_id)
    if call_log is None:
        return None

    changed = False
    for field, value in changes.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if getattr(call_log, field) != value:
            setattr(call_log, field, value)
            changed = True

    if changed:
        call_log.updated_at = utcnow()
        session.add(call_log)
        await session.flush()
    return call_log


async def delete_call_log(session: AsyncSession, call_log_id: str) -> bool:
    """Delete a call log; return False when nothing matched."""

    result = await session.execute(delete(CallLog).where(CallLog.id == call_log_id))
    return (result.rowcount or 0) > 0
