"""AuthorizationService with in-memory assignment store, resolver and cache."""

import pytest

from scopegate.application.dtos.assignment import RoleAssignmentResult
from scopegate.application.dtos.role import RoleResult
from scopegate.application.services import AuthorizationService
from scopegate.core.request_context import RequestContext
from scopegate.domain.value_objects import ScopeRef
from scopegate.infrastructure.cache.keys import (
    org_access_key,
    role_permissions_key,
    user_teams_key,
)
from scopegate.infrastructure.persistence.scope_resolver import scope_chain

ADMIN = RoleResult("r-admin", "Admin", "admin", 100, None, None)
MANAGER = RoleResult("r-manager", "Manager", "manager", 50, None, None)
STAFF = RoleResult("r-staff", "Staff", "staff", 10, None, None)


class FakeAssignmentStore:
    """Applies the same scope chain as the SQL resolver, over a list."""

    def __init__(self, rows: list[tuple[str, RoleResult, str | None, str | None]]) -> None:
        self.rows = [
            RoleAssignmentResult(i, user_id, role, org, branch)
            for i, (user_id, role, org, branch) in enumerate(rows, start=1)
        ]

    async def list_for_context(self, user_id, organization_id=None, branch_id=None):
        chain = scope_chain(ScopeRef(organization_id, branch_id))
        return [
            a
            for a in self.rows
            if a.user_id == user_id and ScopeRef(a.organization_id, a.branch_id) in chain
        ]

    async def list_for_user(self, user_id, organization_id=None):
        return [
            a
            for a in self.rows
            if a.user_id == user_id
            and (organization_id is None or a.organization_id in (None, organization_id))
        ]

    async def highest_level(self, user_id, organization_id=None, branch_id=None):
        roles = [a.role for a in await self.list_for_context(user_id, organization_id, branch_id)]
        return max((r.level for r in roles), default=0)

    async def has_role(self, user_id, slug, organization_id=None, branch_id=None):
        roles = [a.role for a in await self.list_for_context(user_id, organization_id, branch_id)]
        return any(r.slug == slug for r in roles)


class FakeResolver:
    def __init__(self, role_slugs=None, team_slugs=None, user_teams=None) -> None:
        self.role_slugs = role_slugs or {}
        self.team_slugs = team_slugs or {}
        self.user_teams = user_teams or {}
        self.role_calls = 0

    async def get_role_permission_slugs(self, role_id):
        self.role_calls += 1
        return sorted(self.role_slugs.get(role_id, []))

    async def get_team_permission_slugs(self, team_id):
        return sorted(self.team_slugs.get(team_id, []))

    async def get_user_team_ids(self, user_id, organization_id):
        return self.user_teams.get((user_id, organization_id), [])


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver(
        role_slugs={
            ADMIN.id: ["users.manage", "orders.view", "orders.approve"],
            MANAGER.id: ["orders.view", "orders.approve"],
            STAFF.id: ["orders.view"],
        },
        team_slugs={"team-ops": ["reports.view"]},
        user_teams={("u1", "org1"): ["team-ops"]},
    )


@pytest.fixture
def store() -> FakeAssignmentStore:
    # u1: manager org-wide in org1, staff at branch b1 of org1.
    # u2: admin globally.
    return FakeAssignmentStore(
        [
            ("u1", MANAGER, "org1", None),
            ("u1", STAFF, "org1", "b1"),
            ("u2", ADMIN, None, None),
        ]
    )


@pytest.fixture
def service(store, resolver, fake_cache) -> AuthorizationService:
    return AuthorizationService(store, resolver, fake_cache)


async def test_roles_follow_scope_chain(service: AuthorizationService) -> None:
    """Org-wide roles reach every branch; branch roles only their own."""
    assert await service.get_roles_for_context("u1") == []
    assert await service.get_roles_for_context("u1", "org1") == [MANAGER]
    assert await service.get_roles_for_context("u1", "org1", "b1") == [MANAGER, STAFF]
    assert await service.get_roles_for_context("u1", "org1", "b2") == [MANAGER]
    assert await service.get_roles_for_context("u1", "org2") == []


async def test_global_role_applies_everywhere(service: AuthorizationService) -> None:
    for org, branch in ((None, None), ("org1", None), ("org9", "b9")):
        assert await service.has_role_in_context("u2", "admin", org, branch)


async def test_highest_level_zero_means_no_role(service: AuthorizationService) -> None:
    assert await service.get_highest_role_level_in_context("u1") == 0
    assert await service.get_highest_role_level_in_context("nobody", "org1") == 0
    assert await service.get_highest_role_level_in_context("u1", "org1", "b1") == 50


async def test_permissions_are_monotonic_along_the_chain(service: AuthorizationService) -> None:
    org_wide = await service.get_all_permissions("u1", "org1")
    branch = await service.get_all_permissions("u1", "org1", "b1")
    assert org_wide <= branch
    assert org_wide == {"orders.view", "orders.approve", "reports.view"}


async def test_team_permissions_only_with_organization(service: AuthorizationService) -> None:
    assert "reports.view" in await service.get_all_permissions("u1", "org1")
    assert "reports.view" not in await service.get_all_permissions("u1")


async def test_other_organization_does_not_leak(service: AuthorizationService) -> None:
    assert await service.get_all_permissions("u1", "org2") == set()
    assert not await service.has_permission("u1", "orders.view", "org2")


async def test_any_and_all_edge_cases(service: AuthorizationService) -> None:
    assert not await service.has_any_permission("u1", [], "org1")
    assert await service.has_all_permissions("u1", [], "org1")
    assert await service.has_any_permission("u1", ["missing", "orders.view"], "org1")
    assert not await service.has_all_permissions("u1", ["missing", "orders.view"], "org1")
    assert await service.has_all_permissions(
        "u1", ["orders.view", "orders.view", "orders.approve"], "org1"
    )


async def test_check_access_uses_request_context(service: AuthorizationService) -> None:
    assert await service.check_access("u1", "orders.approve", RequestContext("org1", "b1"))
    assert not await service.check_access("u1", "orders.approve", RequestContext())


async def test_role_permissions_are_cached(
    service: AuthorizationService, resolver: FakeResolver, fake_cache
) -> None:
    await service.get_role_permissions(MANAGER.id)
    await service.get_role_permissions(MANAGER.id)
    assert resolver.role_calls == 1
    assert fake_cache.store[role_permissions_key(MANAGER.id)] == ["orders.approve", "orders.view"]


async def test_broken_cache_recomputes_same_answer(
    service: AuthorizationService, resolver: FakeResolver, fake_cache
) -> None:
    expected = await service.get_all_permissions("u1", "org1", "b1")
    fake_cache.broken = True
    calls_before = resolver.role_calls
    assert await service.get_all_permissions("u1", "org1", "b1") == expected
    assert resolver.role_calls > calls_before


async def test_without_cache_every_call_hits_resolver(store, resolver) -> None:
    service = AuthorizationService(store, resolver, cache=None)
    await service.get_role_permissions(STAFF.id)
    await service.get_role_permissions(STAFF.id)
    assert resolver.role_calls == 2


async def test_invalidate_role_drops_cached_set(
    service: AuthorizationService, resolver: FakeResolver, fake_cache
) -> None:
    await service.get_role_permissions(STAFF.id)
    resolver.role_slugs[STAFF.id] = ["orders.view", "orders.create"]
    await service.invalidate_role(STAFF.id)
    assert await service.get_role_permissions(STAFF.id) == ["orders.create", "orders.view"]


async def test_purge_user_organization(service: AuthorizationService, fake_cache) -> None:
    fake_cache.store[org_access_key("u1", "org1")] = {"organization_id": "org1"}
    fake_cache.store[user_teams_key("u1", "org1")] = ["team-ops"]
    fake_cache.store[user_teams_key("u1", "org2")] = ["team-x"]
    await service.purge_user_organization("u1", "org1")
    assert org_access_key("u1", "org1") not in fake_cache.store
    assert user_teams_key("u1", "org1") not in fake_cache.store
    assert user_teams_key("u1", "org2") in fake_cache.store
