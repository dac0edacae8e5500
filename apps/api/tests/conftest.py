"""Shared fixtures: in-memory SQLite store, fake identity verifier, API client."""
from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.errors import AuthenticationError
from app.db.session import get_session
from app.main import app
from app.models.base import Base
from app.services.auth import VerifiedIdentity, get_identity_verifier

GOOD_TOKEN = "good-token"
OTHER_TOKEN = "other-token"
AUTH_HEADERS = {"Authorization": f"Bearer {GOOD_TOKEN}"}


class FakeVerifier:
    """Accepts a fixed set of tokens instead of calling the identity provider."""

    def __init__(self) -> None:
        self.identities = {
            GOOD_TOKEN: VerifiedIdentity(subject_id="uid-nurse", email="nurse@clinic.example"),
            OTHER_TOKEN: VerifiedIdentity(subject_id="uid-desk", email=None),
        }
        self.calls: list[str] = []

    async def verify(self, token: str) -> VerifiedIdentity:
        self.calls.append(token)
        identity = self.identities.get(token)
        if identity is None:
            raise AuthenticationError()
        return identity


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    verifier: FakeVerifier,
) -> AsyncGenerator[AsyncClient, None]:
    async def _override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_identity_verifier] = lambda: verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver", headers=AUTH_HEADERS) as http:
        yield http

    app.dependency_overrides.clear()
