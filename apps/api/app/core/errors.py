"""Domain errors surfaced by the API and their HTTP mapping."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error carrying an HTTP status and a caller-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: list[str] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"error": self.message}
        if self.details:
            payload["details"] = list(self.details)
        return payload


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Missing or invalid credentials"


class InputValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StoreError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage failure"


@asynccontextmanager
async def store_errors(message: str) -> AsyncIterator[None]:
    """Translate database and connectivity failures into a StoreError with ``message``.

    The underlying exception is logged here and never reaches the caller.
    """

    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.exception("%s: %s", message, exc)
        raise StoreError(message) from exc
