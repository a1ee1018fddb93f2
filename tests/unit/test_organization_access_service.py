"""OrganizationAccessService and ContextService with fake repositories and console."""

from types import SimpleNamespace

import pytest

from scopegate.application.dtos.access import OrganizationAccess
from scopegate.application.dtos.assignment import RoleAssignmentResult
from scopegate.application.dtos.role import RoleResult
from scopegate.application.services import ContextService, OrganizationAccessService
from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode
from scopegate.domain.exceptions import (
    InvalidScopeException,
    OrganizationAccessDeniedException,
)
from scopegate.infrastructure.cache.keys import org_access_key
from scopegate.infrastructure.exceptions import ConsoleUnavailableException

MANAGER = RoleResult("r-manager", "Manager", "manager", 50, None, None)


class FakeOrganizations:
    def __init__(self, organizations: dict[str, SimpleNamespace]) -> None:
        self.organizations = organizations
        self.mirrored: list[OrganizationAccess] = []

    async def get_in_mode(self, organization_id):
        return self.organizations.get(organization_id)

    async def upsert_from_access(self, access):
        self.mirrored.append(access)


class FakeUsers:
    def __init__(self, memberships: set[tuple[str, str]] = frozenset()) -> None:
        self.memberships = memberships

    async def is_member_of(self, user_id, organization_id):
        return (user_id, organization_id) in self.memberships


class FakeAssignments:
    def __init__(self, rows: list[RoleAssignmentResult]) -> None:
        self.rows = rows

    async def list_for_user(self, user_id, organization_id=None):
        return [
            a
            for a in self.rows
            if a.user_id == user_id and a.organization_id in (None, organization_id)
        ]

    async def list_for_context(self, user_id, organization_id=None, branch_id=None):
        return [
            a
            for a in self.rows
            if a.user_id == user_id
            and a.organization_id in (None, organization_id)
            and a.branch_id in (None, branch_id)
        ]


class DownConsole:
    async def get_organization_access(self, bearer_token, organization_id):
        raise ConsoleUnavailableException("connect timeout")

    async def get_jwks(self):
        raise ConsoleUnavailableException("connect timeout")


class AnsweringConsole:
    def __init__(self, payload) -> None:
        self.payload = payload

    async def get_organization_access(self, bearer_token, organization_id):
        return self.payload

    async def get_jwks(self):
        return {}


class FakeBranches:
    def __init__(self, branches: list[SimpleNamespace]) -> None:
        self.branches = branches

    async def get_in_organization(self, branch_id, organization_id):
        for b in self.branches:
            if b.id == branch_id and b.organization_id == organization_id:
                return b
        return None

    async def get_headquarters(self, organization_id):
        for b in self.branches:
            if b.organization_id == organization_id and b.is_headquarters:
                return b
        return None


class FakeTeams:
    def __init__(self, teams: list[SimpleNamespace], members: set[tuple[str, str]]) -> None:
        self.teams = teams
        self.members = members

    async def get_in_organization(self, team_id, organization_id):
        for t in self.teams:
            if t.id == team_id and t.organization_id == organization_id:
                return t
        return None

    async def has_member(self, team_id, user_id):
        return (team_id, user_id) in self.members


ACME = SimpleNamespace(id="org1", slug="acme", name="Acme", is_active=True)
CLOSED = SimpleNamespace(id="org2", slug="closed", name="Closed", is_active=False)


def _branch(branch_id, organization_id, name, is_headquarters):
    return SimpleNamespace(
        id=branch_id,
        organization_id=organization_id,
        name=name,
        is_headquarters=is_headquarters,
    )


def _service(
    assignments=(),
    memberships=frozenset(),
    console=None,
    cache=None,
    mode=AuthMode.STANDALONE,
):
    return OrganizationAccessService(
        organization_repo=FakeOrganizations({"org1": ACME, "org2": CLOSED}),
        user_repo=FakeUsers(memberships),
        assignment_store=FakeAssignments(list(assignments)),
        cache=cache,
        console=console,
        mode=mode,
    )


class TestLocalAccess:
    async def test_member_without_roles_gets_default_service_role(self) -> None:
        access = await _service(memberships={("u1", "org1")}).check_access("u1", "org1")
        assert access is not None
        assert access.organization_slug == "acme"
        assert access.service_role == "member"
        assert access.service_role_level == 0

    async def test_org_wide_assignment_sets_service_role(self) -> None:
        rows = [RoleAssignmentResult(1, "u1", MANAGER, "org1", None)]
        access = await _service(assignments=rows).check_access("u1", "org1")
        assert access.service_role == "manager"
        assert access.service_role_level == 50

    async def test_branch_assignment_grants_access_but_not_service_role(self) -> None:
        rows = [RoleAssignmentResult(1, "u1", MANAGER, "org1", "b1")]
        access = await _service(assignments=rows).check_access("u1", "org1")
        assert access is not None
        assert access.service_role_level == 0

    async def test_stranger_denied(self) -> None:
        assert await _service().check_access("u1", "org1") is None

    async def test_inactive_or_unknown_organization_denied(self) -> None:
        service = _service(memberships={("u1", "org2"), ("u1", "org3")})
        assert await service.check_access("u1", "org2") is None
        assert await service.check_access("u1", "org3") is None

    async def test_grant_is_cached_denial_is_not(self, fake_cache) -> None:
        service = _service(memberships={("u1", "org1")}, cache=fake_cache)
        await service.check_access("u1", "org1")
        await service.check_access("u2", "org1")
        assert org_access_key("u1", "org1") in fake_cache.store
        assert org_access_key("u2", "org1") not in fake_cache.store


class TestConsoleAccess:
    async def test_console_payload_is_mirrored(self) -> None:
        payload = {
            "organization_slug": "acme",
            "organization_name": "Acme",
            "organization_role": "owner",
            "service_role": "admin",
            "service_role_level": 100,
        }
        service = _service(console=AnsweringConsole(payload), mode=AuthMode.CONSOLE)
        access = await service.check_access("u1", "org1", bearer_token="tok")
        assert access.service_role == "admin"
        assert access.organization_role == "owner"
        assert service._organizations.mirrored == [access]

    async def test_console_denial(self) -> None:
        service = _service(
            memberships={("u1", "org1")},
            console=AnsweringConsole(None),
            mode=AuthMode.CONSOLE,
        )
        assert await service.check_access("u1", "org1", bearer_token="tok") is None

    async def test_unreachable_console_falls_back_to_local_data(self) -> None:
        service = _service(
            memberships={("u1", "org1")}, console=DownConsole(), mode=AuthMode.CONSOLE
        )
        access = await service.check_access("u1", "org1", bearer_token="tok")
        assert access is not None
        assert access.service_role == "member"

    async def test_without_bearer_token_local_rule_applies(self) -> None:
        service = _service(console=DownConsole(), mode=AuthMode.CONSOLE)
        assert await service.check_access("u1", "org1") is None


class TestContextService:
    @pytest.fixture
    def branches(self) -> FakeBranches:
        return FakeBranches(
            [
                _branch("b-hq", "org1", "HQ", True),
                _branch("b-east", "org1", "East", False),
                _branch("b-other", "org9", "Other", False),
            ]
        )

    @pytest.fixture
    def teams(self) -> FakeTeams:
        return FakeTeams(
            [
                SimpleNamespace(id="t-sales", organization_id="org1", name="Sales"),
                SimpleNamespace(id="t-foreign", organization_id="org9", name="Foreign"),
            ],
            members={("t-sales", "u1")},
        )

    async def test_no_organization(self, branches, teams) -> None:
        service = ContextService(_service(), branches, teams)
        context = await service.resolve("u1", RequestContext())
        assert context.organization_id is None
        assert context.team_id is None

    async def test_team_without_organization_rejected(self, branches, teams) -> None:
        service = ContextService(_service(), branches, teams)
        with pytest.raises(InvalidScopeException, match="requires an organization"):
            await service.resolve("u1", RequestContext(team_id="t-sales"))

    async def test_branch_without_organization_rejected(self, branches, teams) -> None:
        service = ContextService(_service(), branches, teams)
        with pytest.raises(InvalidScopeException):
            await service.resolve("u1", RequestContext(branch_id="b-east"))

    async def test_access_denied(self, branches, teams) -> None:
        service = ContextService(_service(), branches, teams)
        with pytest.raises(OrganizationAccessDeniedException):
            await service.resolve("u1", RequestContext("org1"))

    async def test_foreign_branch_rejected(self, branches, teams) -> None:
        service = ContextService(_service(memberships={("u1", "org1")}), branches, teams)
        with pytest.raises(InvalidScopeException, match="does not belong"):
            await service.resolve("u1", RequestContext("org1", "b-other"))

    async def test_branch_resolved_with_name_and_access(self, branches, teams) -> None:
        rows = [RoleAssignmentResult(1, "u1", MANAGER, "org1", None)]
        service = ContextService(_service(assignments=rows), branches, teams)
        context = await service.resolve("u1", RequestContext("org1", "b-east"))
        assert context.branch_id == "b-east"
        assert context.branch_name == "East"
        assert context.service_role == "manager"
        assert context.service_role_level == 50

    async def test_headquarters_fallback(self, branches, teams) -> None:
        access = _service(memberships={("u1", "org1")})
        without = await ContextService(access, branches, teams).resolve(
            "u1", RequestContext("org1")
        )
        assert without.branch_id is None
        with_hq = await ContextService(access, branches, teams, fallback_to_hq=True).resolve(
            "u1", RequestContext("org1")
        )
        assert with_hq.branch_id == "b-hq"
        assert with_hq.branch_name == "HQ"

    async def test_organization_wide_threshold_passed_through(self, branches, teams) -> None:
        rows = [RoleAssignmentResult(1, "u1", MANAGER, "org1", None)]
        service = ContextService(
            _service(assignments=rows), branches, teams, organization_wide_access_level=50
        )
        context = await service.resolve("u1", RequestContext("org1"))
        assert context.has_organization_wide_access()

    async def test_foreign_team_rejected(self, branches, teams) -> None:
        service = ContextService(_service(memberships={("u1", "org1")}), branches, teams)
        with pytest.raises(InvalidScopeException, match="does not belong"):
            await service.resolve("u1", RequestContext("org1", team_id="t-foreign"))
        with pytest.raises(InvalidScopeException, match="does not belong"):
            await service.resolve("u1", RequestContext("org1", team_id="t-unknown"))

    async def test_team_member_keeps_team(self, branches, teams) -> None:
        service = ContextService(_service(memberships={("u1", "org1")}), branches, teams)
        context = await service.resolve("u1", RequestContext("org1", team_id="t-sales"))
        assert context.team_id == "t-sales"

    async def test_non_member_team_rejected(self, branches, teams) -> None:
        service = ContextService(_service(memberships={("u2", "org1")}), branches, teams)
        with pytest.raises(InvalidScopeException, match="Not a member"):
            await service.resolve("u2", RequestContext("org1", team_id="t-sales"))

    async def test_organization_wide_access_skips_membership(self, branches, teams) -> None:
        rows = [RoleAssignmentResult(1, "u2", MANAGER, "org1", None)]
        service = ContextService(
            _service(assignments=rows), branches, teams, organization_wide_access_level=50
        )
        context = await service.resolve("u2", RequestContext("org1", team_id="t-sales"))
        assert context.team_id == "t-sales"
