"""Scope and mode hooks: auto-fill, immutability and mode-filtered reads."""

import pytest
from sqlalchemy import column, select, table

from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode
from scopegate.domain.exceptions import InvalidScopeException, MissingContextException
from scopegate.infrastructure.persistence.models import Location, Organization, Permission, Team
from scopegate.infrastructure.persistence.repositories import (
    BranchRepository,
    LocationRepository,
    OrganizationRepository,
    TeamRepository,
)
from scopegate.infrastructure.persistence.scoping import (
    bind_auth_mode,
    bind_request_context,
    in_current_branch,
    in_current_organization,
    in_current_team,
    only_console,
    only_current_mode,
    only_standalone,
)


@pytest.mark.requires_db
async def test_new_rows_stamped_with_session_mode(db_session) -> None:
    standalone = await OrganizationRepository(db_session).create_organization("Acme", "acme")
    assert standalone.is_standalone is True

    bind_auth_mode(db_session, AuthMode.CONSOLE)
    console = await OrganizationRepository(db_session).create_organization("Globex", "globex")
    assert console.is_standalone is False


@pytest.mark.requires_db
async def test_explicit_mode_is_kept(db_session) -> None:
    org = await OrganizationRepository(db_session).create_organization(
        "Globex", "globex", is_standalone=False
    )
    assert org.is_standalone is False


@pytest.mark.requires_db
async def test_mode_filters_isolate_records(db_session) -> None:
    repo = OrganizationRepository(db_session)
    local = await repo.create_organization("Acme", "acme")
    remote = await repo.create_organization("Globex", "globex", is_standalone=False)

    assert await repo.get_in_mode(local.id) is not None
    assert await repo.get_in_mode(remote.id) is None
    console_repo = OrganizationRepository(db_session, mode=AuthMode.CONSOLE)
    assert await console_repo.get_in_mode(remote.id) is not None
    assert await console_repo.get_in_mode(local.id) is None

    standalone_ids = (
        await db_session.execute(only_standalone(select(Organization.id), Organization))
    ).scalars().all()
    console_ids = (
        await db_session.execute(only_console(select(Organization.id), Organization))
    ).scalars().all()
    assert standalone_ids == [local.id]
    assert console_ids == [remote.id]


@pytest.mark.requires_db
async def test_unfiltered_select_sees_both_modes(db_session) -> None:
    repo = OrganizationRepository(db_session)
    await repo.create_organization("Acme", "acme")
    await repo.create_organization("Globex", "globex", is_standalone=False)
    rows = (await db_session.execute(select(Organization))).scalars().all()
    assert len(rows) == 2


@pytest.mark.requires_db
async def test_mode_is_immutable_after_insert(db_session) -> None:
    org = await OrganizationRepository(db_session).create_organization("Acme", "acme")
    org.is_standalone = False
    await db_session.flush()
    await db_session.refresh(org)
    assert org.is_standalone is True


def test_mode_filter_requires_mode_tagged_model() -> None:
    with pytest.raises(TypeError):
        only_current_mode(select(Permission), Permission)


@pytest.mark.requires_db
async def test_branch_must_share_organization_mode(db_session) -> None:
    remote = await OrganizationRepository(db_session).create_organization(
        "Globex", "globex", is_standalone=False
    )
    with pytest.raises(InvalidScopeException, match="same mode"):
        await BranchRepository(db_session).create_branch(remote.id, "Main", "main")


@pytest.mark.requires_db
async def test_scope_fields_filled_from_context(db_session) -> None:
    bind_request_context(db_session, RequestContext("org1", "br1"))
    team = await TeamRepository(db_session).create_team("Ops")
    location = await LocationRepository(db_session).create_location("Dock", "D1")
    assert team.organization_id == "org1"
    assert team.is_standalone is True
    assert location.organization_id == "org1"
    assert location.branch_id == "br1"


@pytest.mark.requires_db
async def test_explicit_scope_value_wins_over_context(db_session) -> None:
    bind_request_context(db_session, RequestContext("org1"))
    team = Team(name="Ops", organization_id="org9")
    db_session.add(team)
    await db_session.flush()
    assert team.organization_id == "org9"


@pytest.mark.requires_db
async def test_scope_field_immutable_once_set(db_session) -> None:
    bind_request_context(db_session, RequestContext("org1"))
    repo = TeamRepository(db_session)
    created = await repo.create_team("Ops")
    team = await repo.get_by_id(created.id)
    team.organization_id = "org2"
    team.name = "Operations"
    await db_session.flush()
    await db_session.refresh(team)
    assert team.organization_id == "org1"
    assert team.name == "Operations"


@pytest.mark.requires_db
async def test_null_scope_field_may_be_set_later(db_session) -> None:
    team = Team(name="Floating")
    db_session.add(team)
    await db_session.flush()
    assert team.organization_id is None
    team.organization_id = "org1"
    await db_session.flush()
    await db_session.refresh(team)
    assert team.organization_id == "org1"


@pytest.mark.requires_db
async def test_context_filters(db_session) -> None:
    repo = TeamRepository(db_session)
    db_session.add_all(
        [
            Team(name="A", organization_id="org1"),
            Team(name="B", organization_id="org1"),
            Team(name="C", organization_id="org2"),
            Team(name="D", organization_id="org1", is_standalone=False),
        ]
    )
    await db_session.flush()
    teams = await repo.list_in_context(RequestContext("org1"))
    assert [t.name for t in teams] == ["A", "B"]
    with pytest.raises(MissingContextException):
        in_current_organization(select(Team), Team, RequestContext())


@pytest.mark.requires_db
async def test_locations_narrowed_to_context_branch(db_session) -> None:
    repo = LocationRepository(db_session)
    bind_request_context(db_session, RequestContext("org1", "br1"))
    await repo.create_location("North", "N1")
    bind_request_context(db_session, RequestContext("org1", "br2"))
    await repo.create_location("South", "S1")

    whole_org = await repo.list_in_context(RequestContext("org1"))
    one_branch = await repo.list_in_context(RequestContext("org1", "br2"))
    assert [loc.code for loc in whole_org] == ["N1", "S1"]
    assert [loc.code for loc in one_branch] == ["S1"]


@pytest.mark.requires_db
async def test_branch_filter_requires_branch(db_session) -> None:
    db_session.add_all(
        [
            Location(name="Dock", code="N1", organization_id="org1", branch_id="br1"),
            Location(name="Yard", code="S1", organization_id="org1", branch_id="br2"),
        ]
    )
    await db_session.flush()
    stmt = in_current_branch(select(Location.code), Location, RequestContext("org1", "br2"))
    assert (await db_session.execute(stmt)).scalars().all() == ["S1"]
    with pytest.raises(MissingContextException) as exc_info:
        in_current_branch(select(Location), Location, RequestContext("org1"))
    assert exc_info.value.details["dimension"] == "branch"


def test_team_filter_requires_team() -> None:
    notes = table("note", column("id"), column("team_id"))
    stmt = in_current_team(select(notes), notes.c, RequestContext("org1", team_id="t1"))
    assert "note.team_id = :team_id_1" in str(stmt)
    with pytest.raises(MissingContextException) as exc_info:
        in_current_team(select(notes), notes.c, RequestContext("org1"))
    assert exc_info.value.details["dimension"] == "team"
