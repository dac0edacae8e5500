"""Schemas for the call log API."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.call_log import CallPriority, CallStatus, CallType

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Nullable free-text fields; blank input clears them.
CLEARABLE_FIELDS = ("notes", "assigned_to", "follow_up_note")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CallLogCreate(BaseModel):
    """Validated input for a new call log."""

    model_config = ConfigDict(extra="ignore")

    patient_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    call_type: CallType
    status: CallStatus = CallStatus.NEW
    priority: CallPriority = CallPriority.MEDIUM
    notes: str | None = None
    assigned_to: str | None = None
    follow_up_needed: bool = False
    follow_up_note: str | None = None

    @field_validator(*CLEARABLE_FIELDS, mode="before")
    @classmethod
    def _clear_blank(cls, value: object) -> object:
        return _blank_to_none(value)


class CallLogUpdate(BaseModel):
    """Sparse patch for an existing call log.

    Only the fields present in ``model_fields_set`` are applied, so an omitted
    field and a field explicitly sent as ``null`` are distinct. Fields that the
    store cannot hold as null reject an explicit ``null``.
    """

    model_config = ConfigDict(extra="ignore")

    patient_name: str = Field(default=None, min_length=1)  # type: ignore[assignment]
    phone_number: str = Field(default=None, min_length=1)  # type: ignore[assignment]
    call_type: CallType = None  # type: ignore[assignment]
    status: CallStatus = None  # type: ignore[assignment]
    priority: CallPriority = None  # type: ignore[assignment]
    notes: str | None = None
    assigned_to: str | None = None
    follow_up_needed: bool = None  # type: ignore[assignment]
    follow_up_note: str | None = None

    @field_validator(*CLEARABLE_FIELDS, mode="before")
    @classmethod
    def _clear_blank(cls, value: object) -> object:
        return _blank_to_none(value)

    def changes(self) -> dict[str, object]:
        """Return only the explicitly supplied fields and their values."""

        return {name: getattr(self, name) for name in self.model_fields_set}


class CallLogRead(BaseModel):
    """Call log as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_name: str
    phone_number: str
    call_type: CallType
    status: CallStatus
    priority: CallPriority
    notes: str | None = None
    assigned_to: str | None = None
    follow_up_needed: bool
    follow_up_note: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class PageParams(BaseModel):
    """Normalised pagination and filter parameters."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: str | None = None
    search: str | None = None


class PaginatedCallLogs(BaseModel):
    data: list[CallLogRead]
    total: int
    page: int
    limit: int
    total_pages: int = Field(serialization_alias="totalPages")
