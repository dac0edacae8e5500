"""Bearer-token authentication backed by Firebase ID token verification."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

import firebase_admin
from fastapi import Depends, Header
from firebase_admin import auth as firebase_auth
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..core.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
    """Subject resolved from a valid bearer token."""

    subject_id: str
    email: str | None = None


class IdentityVerifier(Protocol):
    async def verify(self, token: str) -> VerifiedIdentity: ...


class FirebaseIdentityVerifier:
    """Verify Firebase ID tokens with the Admin SDK."""

    def __init__(self, project_id: str = "") -> None:
        self._project_id = project_id
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            options = {"projectId": self._project_id} if self._project_id else None
            self._app = firebase_admin.initialize_app(options=options)
            logger.info("Firebase Admin SDK initialised for project %s", self._project_id or "<default>")
        return self._app

    async def verify(self, token: str) -> VerifiedIdentity:
        app = self._get_app()
        try:
            decoded = await run_in_threadpool(firebase_auth.verify_id_token, token, app)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError, ValueError) as exc:
            # ExpiredIdTokenError and RevokedIdTokenError derive from InvalidIdTokenError.
            logger.warning("Rejected bearer token: %s", type(exc).__name__)
            raise AuthenticationError() from exc

        return VerifiedIdentity(subject_id=decoded["uid"], email=decoded.get("email"))


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """Return the process-wide identity verifier."""

    return FirebaseIdentityVerifier(project_id=settings.firebase_project_id)


def parse_bearer_token(header_value: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""

    if not header_value:
        raise AuthenticationError()

    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError()
    return parts[1]


async def require_identity(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedIdentity:
    """FastAPI dependency gating every call log endpoint."""

    token = parse_bearer_token(authorization)
    return await verifier.verify(token)
