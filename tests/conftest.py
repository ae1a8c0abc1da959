"""
Shared pytest fixtures and configuration
"""
import os

# Tests never talk to Supabase or Postgres
os.environ["CMS_BACKEND"] = "memory"
os.environ["MODE"] = "development"

import itertools
import pytest
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncGenerator, Dict, Optional, Tuple
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.sqlite import base as sqlite_base

from app.main import app
from app.common.errors import InvalidCredentials
from app.database import import_models
from app.dependencies import get_repository
from app.apps.authentication.dependencies import get_auth_provider
from app.apps.authentication.models import Profile, Role
from app.apps.authentication.notifications import Notifier
from app.apps.authentication.profiles import ProfileResolver
from app.apps.authentication.session import SessionStore
from app.apps.authentication.utils import AuthSession, Identity
from app.apps.cms.repository import ContentRepository, MemoryBackend, SqlBackend


# Patch SQLite dialect to handle JSONB (PostgreSQL-specific type)
# SQLite doesn't support JSONB, so we map it to JSON
def visit_jsonb(self, type_, **kw):
    """Map JSONB to JSON for SQLite compatibility"""
    return self.visit_JSON(type_, **kw)

# Monkey patch the SQLite type compiler to handle JSONB
sqlite_base.SQLiteTypeCompiler.visit_JSONB = visit_jsonb


# Note: aiosqlite must be installed for async SQLite support
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Deterministic clock; every call moves forward by ``step`` (set it to zero to freeze time)"""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 12, 0, 0)):
        self.now = start
        self.step = timedelta(seconds=1)

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


class FakeAuthBackend:
    """In-process stand-in for Supabase auth"""

    def __init__(self):
        self.users: Dict[str, Tuple[str, Identity]] = {}
        self.tokens: Dict[str, Identity] = {}
        self.calls = []
        self.confirm_email = False
        self._ids = itertools.count(1)

    def add_user(self, email: str, password: str = "secret123", full_name: Optional[str] = None) -> Identity:
        identity = Identity(
            id=f"user-{next(self._ids)}",
            email=email,
            metadata={"full_name": full_name} if full_name else {},
        )
        self.users[email] = (password, identity)
        return identity

    def issue_token(self, identity: Identity) -> AuthSession:
        token = f"token-{identity.id}-{len(self.tokens)}"
        self.tokens[token] = identity
        return AuthSession(identity, token, f"refresh-{token}", 3600)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        self.calls.append(("sign_in", email))
        stored = self.users.get(email)
        if stored is None or stored[0] != password:
            raise InvalidCredentials("Invalid login credentials")
        return self.issue_token(stored[1])

    async def sign_up(self, email: str, password: str, full_name: str):
        self.calls.append(("sign_up", email))
        if email in self.users:
            raise InvalidCredentials("User already registered")
        identity = self.add_user(email, password, full_name)
        session = None if self.confirm_email else self.issue_token(identity)
        return identity, session

    async def sign_out(self, session: AuthSession) -> None:
        self.calls.append(("sign_out", session.identity.email))
        self.tokens.pop(session.access_token, None)

    async def get_user(self, access_token: str) -> Optional[Identity]:
        self.calls.append(("get_user", access_token))
        return self.tokens.get(access_token)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_repository(clock) -> ContentRepository:
    return ContentRepository(MemoryBackend(), clock)


@asynccontextmanager
async def sqlite_repository(clock) -> AsyncGenerator[ContentRepository, None]:
    """
    Repository on an in-memory SQLite database.
    A fresh engine per test keeps tests independent.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(import_models().create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    repository = ContentRepository(SqlBackend(session_factory), clock)
    yield repository
    await repository.close()
    await engine.dispose()


@pytest.fixture
async def sql_repository(clock) -> AsyncGenerator[ContentRepository, None]:
    async with sqlite_repository(clock) as repository:
        yield repository


@pytest.fixture(params=["memory", "database"])
async def repository(request, clock) -> AsyncGenerator[ContentRepository, None]:
    """Runs a test once per storage backend"""
    if request.param == "memory":
        repository = ContentRepository(MemoryBackend(), clock)
        yield repository
        await repository.close()
    else:
        async with sqlite_repository(clock) as repository:
            yield repository


@pytest.fixture
def fake_auth() -> FakeAuthBackend:
    return FakeAuthBackend()


@pytest.fixture
def resolver(memory_repository) -> ProfileResolver:
    return ProfileResolver(memory_repository.backend, default_role=Role.AUTHOR)


@pytest.fixture
def session_store(fake_auth, resolver) -> SessionStore:
    store = SessionStore(lambda: fake_auth, resolver, Notifier())
    yield store
    store.close()


@pytest.fixture(scope="function")
def client(memory_repository, fake_auth) -> TestClient:
    """
    Create a test client backed by the in-memory store and fake auth.
    """
    app.dependency_overrides[get_repository] = lambda: memory_repository
    app.dependency_overrides[get_auth_provider] = lambda: (lambda: fake_auth)

    test_client = TestClient(app)
    yield test_client

    # Cleanup
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(memory_repository, fake_auth):
    """
    Create a user with the given role and return its Authorization header.

    Usage:
        headers = await login_as(Role.EDITOR)
    """
    async def _login_as(role: Role = Role.AUTHOR, email: Optional[str] = None) -> Dict[str, str]:
        email = email or f"{role.value}@reclaimd.com"
        identity = fake_auth.add_user(email)
        now = datetime.now()
        await memory_repository.backend.insert(Profile, {
            "id": identity.id,
            "email": email,
            "full_name": role.value.capitalize(),
            "role": role.value,
            "created_at": now,
            "updated_at": now,
        })
        session = fake_auth.issue_token(identity)
        return {"Authorization": f"Bearer {session.access_token}"}

    return _login_as
