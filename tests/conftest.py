"""Pytest configuration and fixtures for scopegate.

Tests run against an in-memory SQLite database (aiosqlite) created from
the ORM metadata, one fresh database per test. Environment is set before
any scopegate import so Settings validate without a .env file.
"""

import fnmatch
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_MODE"] = "standalone"
os.environ["REDIS_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["SERVICE_SECRET"] = "test-service-secret"

from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from scopegate.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from scopegate.core.limiter import limiter  # noqa: E402
from scopegate.infrastructure.persistence import models  # noqa: E402,F401
from scopegate.infrastructure.persistence.database import (  # noqa: E402
    Base,
    build_session_factory,
    configure_sqlite,
    get_db,
    get_db_transactional,
)
from scopegate.infrastructure.persistence.models import (  # noqa: E402
    Team,
    TeamMember,
    TeamPermission,
)
from scopegate.infrastructure.persistence.repositories import (  # noqa: E402
    BranchRepository,
    OrganizationRepository,
    PermissionRepository,
    RoleAssignmentRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)
from scopegate.infrastructure.security import create_access_token  # noqa: E402
from scopegate.main import app as fastapi_app  # noqa: E402


class FakeCache:
    """In-memory stand-in for CacheService. broken=True behaves like a Redis outage."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.broken = False
        self.gets = 0
        self.sets = 0

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any:
        self.gets += 1
        if self.broken:
            return None
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        if self.broken:
            return False
        self.sets += 1
        self.store[key] = value
        return True

    async def delete(self, key: str) -> bool:
        if self.broken:
            return False
        self.store.pop(key, None)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        if self.broken:
            return 0
        matched = [k for k in self.store if fnmatch.fnmatchcase(k, pattern)]
        for key in matched:
            del self.store[key]
        return len(matched)


class Seeder:
    """Creates organizations, users, roles and assignments through the repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.roles = RoleRepository(session)
        self.assignments = RoleAssignmentRepository(session, self.roles)

    async def organization(self, slug: str, **kwargs: Any):
        return await OrganizationRepository(self.session).create_organization(
            name=kwargs.pop("name", slug.title()), slug=slug, **kwargs
        )

    async def branch(self, organization_id: str, slug: str, is_headquarters: bool = False):
        return await BranchRepository(self.session).create_branch(
            organization_id, name=slug.title(), slug=slug, is_headquarters=is_headquarters
        )

    async def user(self, email: str, organization_id: str | None = None):
        return await UserRepository(self.session).create_user(
            name=email.split("@")[0].title(), email=email, organization_id=organization_id
        )

    async def permission(self, slug: str, group: str | None = None):
        return await PermissionRepository(self.session).create_permission(
            name=slug, slug=slug, group=group or slug.split(".")[0]
        )

    async def role(
        self,
        slug: str,
        level: int = 10,
        organization_id: str | None = None,
        permissions: list[str] | None = None,
    ):
        role = await self.roles.create_role(
            name=slug.title(), slug=slug, level=level, organization_id=organization_id
        )
        if permissions:
            ids, missing = await PermissionRepository(self.session).resolve_ids(
                slugs=permissions
            )
            assert not missing, missing
            await RolePermissionRepository(self.session).sync(role.id, ids)
        return role

    async def assign(
        self,
        user_id: str,
        role: Any,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        return await self.assignments.assign(user_id, role, organization_id, branch_id)

    async def team(
        self,
        organization_id: str,
        name: str,
        members: tuple[str, ...] = (),
        permissions: tuple[str, ...] = (),
    ) -> Team:
        team = Team(organization_id=organization_id, name=name)
        self.session.add(team)
        await self.session.flush()
        for user_id in members:
            self.session.add(TeamMember(team_id=team.id, user_id=user_id))
        if permissions:
            ids, missing = await PermissionRepository(self.session).resolve_ids(
                slugs=list(permissions)
            )
            assert not missing, missing
            for permission_id in ids:
                self.session.add(TeamPermission(team_id=team.id, permission_id=permission_id))
        await self.session.flush()
        return team


def auth_headers(
    user_id: str,
    organization_id: str | None = None,
    branch_id: str | None = None,
) -> dict[str, str]:
    """Bearer token for user_id plus the context headers."""
    headers = {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}
    if organization_id:
        headers["X-Organization-Id"] = organization_id
    if branch_id:
        headers["X-Branch-Id"] = branch_id
    return headers


@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database with the full schema."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncSession:
    """Session for repository/service tests. Rolled back after the test."""
    factory = build_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def seed(db_session: AsyncSession) -> Seeder:
    return Seeder(db_session)


@pytest.fixture
async def global_roles(seed: Seeder) -> dict[str, Any]:
    """The built-in admin, manager and member roles (global)."""
    return {
        "admin": await seed.role("admin", level=100),
        "manager": await seed.role("manager", level=50),
        "member": await seed.role("member", level=10),
    }


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
async def app(db_session: AsyncSession, fake_cache: FakeCache):
    """The FastAPI app with both session dependencies bound to the test session."""

    async def _override_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _override_db
    fastapi_app.dependency_overrides[get_db_transactional] = _override_db
    fastapi_app.state.cache = fake_cache
    fastapi_app.state.console = None
    limiter.reset()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.cache = None


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def headers():
    """auth_headers(user_id, organization_id=None, branch_id=None) -> request headers."""
    return auth_headers
