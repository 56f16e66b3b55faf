"""Shared test fixtures for the PMHub user hierarchy service."""

import os

# Set test JWT secret before any app imports trigger Settings() validation.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-for-unit-tests-0123456789abcdef")

from collections.abc import AsyncGenerator  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from pmhub.main import app  # noqa: E402
from pmhub.models.user import User, UserRole  # noqa: E402
from pmhub.providers import get_hierarchy_service  # noqa: E402
from pmhub.rate_limit import limiter  # noqa: E402
from pmhub.services.hierarchy_service import UserHierarchyService  # noqa: E402
from tests.helpers.fake_user_repository import FakeUserRepository, make_user  # noqa: E402
from tests.helpers.token_factory import create_access_token  # noqa: E402

# ---------------------------------------------------------------------------
# Fake Redis (drop-in async replacement)
# ---------------------------------------------------------------------------


def _make_fake_redis():
    """Create a fakeredis instance that behaves like redis.asyncio.Redis."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# ---------------------------------------------------------------------------
# Mock DB session
# ---------------------------------------------------------------------------


def _make_mock_session_factory():
    """Return a callable that mimics ``async_sessionmaker().__call__()``.

    Supports ``async with factory() as session`` as used by
    ``get_db_session`` and by the readiness probe (``SELECT 1``).
    """
    session = AsyncMock()
    result_mock = MagicMock()
    result_mock.scalar.return_value = 1
    session.execute.return_value = result_mock
    factory = MagicMock()
    ctx = AsyncMock()
    ctx.__aenter__.return_value = session
    factory.return_value = ctx
    return factory, session


# ---------------------------------------------------------------------------
# Seeded organisation
# ---------------------------------------------------------------------------


@dataclass
class Org:
    """A small organisation with one user per role, backed by a fake repo."""

    repo: FakeUserRepository
    super_admin: User
    admin: User
    manager: User
    member: User

    def headers(self, user: User) -> dict[str, str]:
        return auth_headers(user)


def seed_org() -> Org:
    repo = FakeUserRepository()
    return Org(
        repo=repo,
        super_admin=repo.add(make_user(UserRole.SUPER_ADMIN, name="Sam Root")),
        admin=repo.add(make_user(UserRole.ADMIN, name="Ada Admin")),
        manager=repo.add(make_user(UserRole.MANAGER, name="Max Manager", department="Platform")),
        member=repo.add(make_user(UserRole.MEMBER, name="Mia Member", department="Platform")),
    )


@pytest.fixture()
def org() -> Org:
    return seed_org()


@pytest.fixture()
def hierarchy_service(org) -> UserHierarchyService:
    return UserHierarchyService(org.repo)


# ---------------------------------------------------------------------------
# HTTP client fixture (FastAPI app with mocked infra)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the FastAPI app.

    Infrastructure (DB, Redis) is mocked so tests run without devstack.
    """
    session_factory, _ = _make_mock_session_factory()
    fake_redis = _make_fake_redis()

    app.state.engine = MagicMock()
    app.state.session_factory = session_factory
    app.state.redis = fake_redis
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await fake_redis.aclose()


@pytest_asyncio.fixture()
async def org_client(client, org) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose hierarchy service is backed by the seeded ``org``."""
    app.dependency_overrides[get_hierarchy_service] = lambda: UserHierarchyService(org.repo)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_hierarchy_service, None)


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client."""
    client = _make_fake_redis()
    yield client
    await client.aclose()


# ---------------------------------------------------------------------------
# Auth helpers: generate JWT tokens directly (no login endpoint needed)
# ---------------------------------------------------------------------------


def auth_headers(user: User, **token_kwargs) -> dict[str, str]:
    """Return an Authorization header carrying a valid token for *user*."""
    token = create_access_token(
        user_id=user.id,
        role=UserRole(user.role).value,
        name=user.name,
        email=user.email,
        **token_kwargs,
    )
    return {"Authorization": f"Bearer {token}"}
