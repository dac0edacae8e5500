"""Service-level tests for call log validation and request shaping."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import InputValidationError, NotFoundError, StoreError
from app.models.call_log import CallPriority, CallStatus, CallType
from app.repositories import call_logs as call_logs_repo
from app.services import call_logs as call_logs_service


class DummySession:
    """Minimal session stub supporting async transaction context."""

    def begin(self):  # noqa: D401 - mimic SQLAlchemy's async begin
        class _Tx:
            async def __aenter__(self_inner):
                return self

            async def __aexit__(self_inner, exc_type, exc, tb):
                return False

        return _Tx()


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        (None, None, (1, 10)),
        ("3", "25", (3, 25)),
        ("abc", "xyz", (1, 10)),
        ("0", "0", (1, 10)),
        ("-2", "-5", (1, 10)),
        ("2", "500", (2, 100)),
        (" 4 ", "100", (4, 100)),
    ],
)
def test_parse_page_params_defaults_and_clamps(page, limit, expected):
    params = call_logs_service.parse_page_params(page, limit)

    assert (params.page, params.limit) == expected


def test_parse_page_params_drops_empty_filters():
    params = call_logs_service.parse_page_params(status="", search="")

    assert params.status is None
    assert params.search is None


def test_validate_create_applies_defaults():
    payload = call_logs_service.validate_create(
        {"patient_name": "Jane Doe", "phone_number": "555-1234", "call_type": "intake"}
    )

    assert payload.call_type is CallType.INTAKE
    assert payload.status is CallStatus.NEW
    assert payload.priority is CallPriority.MEDIUM
    assert payload.follow_up_needed is False


def test_validate_create_collects_every_error():
    with pytest.raises(InputValidationError) as excinfo:
        call_logs_service.validate_create(
            {"phone_number": "", "call_type": "xyz", "status": "done", "priority": "asap"}
        )

    error = excinfo.value
    assert error.message == "Validation failed"
    assert error.details == [
        "patient_name is required",
        "phone_number is required",
        call_logs_service.FIELD_MESSAGES["call_type"],
        call_logs_service.FIELD_MESSAGES["status"],
        call_logs_service.FIELD_MESSAGES["priority"],
    ]
    assert "intake, scheduling, billing, pharmacy, referral, other" in error.details[2]


def test_validate_create_rejects_non_string_name():
    with pytest.raises(InputValidationError) as excinfo:
        call_logs_service.validate_create({"patient_name": 42, "phone_number": "555", "call_type": "other"})

    assert excinfo.value.details == ["patient_name is required"]


def test_validate_create_turns_blank_optional_text_into_null():
    payload = call_logs_service.validate_create(
        {
            "patient_name": "Jane",
            "phone_number": "555",
            "call_type": "billing",
            "notes": "   ",
            "assigned_to": "",
        }
    )

    assert payload.notes is None
    assert payload.assigned_to is None


def test_validate_update_tracks_supplied_fields():
    patch = call_logs_service.validate_update({"status": "completed", "assigned_to": None})

    assert patch.changes() == {"status": CallStatus.COMPLETED, "assigned_to": None}


def test_validate_update_rejects_null_for_required_fields():
    with pytest.raises(InputValidationError) as excinfo:
        call_logs_service.validate_update({"patient_name": None})

    assert excinfo.value.message == "patient_name is required"


def test_validate_update_headline_is_first_problem():
    with pytest.raises(InputValidationError) as excinfo:
        call_logs_service.validate_update({"call_type": "bogus", "priority": "whenever"})

    error = excinfo.value
    assert error.message == call_logs_service.FIELD_MESSAGES["call_type"]
    assert error.details == [
        call_logs_service.FIELD_MESSAGES["call_type"],
        call_logs_service.FIELD_MESSAGES["priority"],
    ]


@pytest.mark.asyncio
async def test_update_checks_existence_before_validating(monkeypatch):
    monkeypatch.setattr(call_logs_repo, "get_by_id", AsyncMock(return_value=None))
    update_mock = AsyncMock()
    monkeypatch.setattr(call_logs_repo, "update_call_log", update_mock)

    with pytest.raises(NotFoundError):
        await call_logs_service.update_call_log("missing", {"status": "nonsense"}, DummySession())

    update_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_store_failures_become_store_errors(monkeypatch):
    failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
    monkeypatch.setattr(call_logs_repo, "list_call_logs", AsyncMock(side_effect=failure))

    params = call_logs_service.parse_page_params()
    with pytest.raises(StoreError) as excinfo:
        await call_logs_service.list_call_logs(params, DummySession())

    assert excinfo.value.message == "Failed to fetch call logs"
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_list_shapes_paginated_response(monkeypatch):
    row = SimpleNamespace(
        id="log-1",
        patient_name="Jane Doe",
        phone_number="555-1234",
        call_type=CallType.INTAKE,
        status=CallStatus.NEW,
        priority=CallPriority.MEDIUM,
        notes=None,
        assigned_to=None,
        follow_up_needed=False,
        follow_up_note=None,
        created_by="user-1",
        created_at="2025-10-10T12:00:00+00:00",
        updated_at="2025-10-10T12:00:00+00:00",
    )
    page = call_logs_repo.CallLogPage(items=[row], total=21, page=3, limit=10)
    list_mock = AsyncMock(return_value=page)
    monkeypatch.setattr(call_logs_repo, "list_call_logs", list_mock)

    params = call_logs_service.parse_page_params("3", "10", "all", "jane")
    response = await call_logs_service.list_call_logs(params, DummySession())

    assert response.total == 21
    assert response.total_pages == 3
    assert response.model_dump(by_alias=True)["totalPages"] == 3
    assert response.data[0].id == "log-1"
    assert list_mock.await_args.kwargs == {"page": 3, "limit": 10, "status": "all", "search": "jane"}
