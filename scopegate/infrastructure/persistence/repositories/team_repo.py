"""Team and Location repositories (organization-scoped, mode-tagged resources)."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.team import LocationResult, TeamResult
from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode
from scopegate.infrastructure.persistence.models.location import Location
from scopegate.infrastructure.persistence.models.permission import TeamPermission
from scopegate.infrastructure.persistence.models.team import Team, TeamMember
from scopegate.infrastructure.persistence.repositories.base import BaseRepository
from scopegate.infrastructure.persistence.scoping import (
    in_current_context,
    in_current_organization,
    only_current_mode,
)


def team_to_result(t: Team) -> TeamResult:
    return TeamResult(
        id=t.id,
        organization_id=t.organization_id,
        name=t.name,
        is_standalone=t.is_standalone,
    )


def location_to_result(loc: Location) -> LocationResult:
    return LocationResult(
        id=loc.id,
        organization_id=loc.organization_id,
        branch_id=loc.branch_id,
        name=loc.name,
        code=loc.code,
        address=loc.address,
        is_active=loc.is_active,
    )


class TeamRepository(BaseRepository[Team]):
    """Team repository. organization_id of new teams comes from the session's context."""

    def __init__(self, db: AsyncSession, mode: AuthMode | None = None) -> None:
        super().__init__(db, Team)
        self.mode = mode

    async def list_in_context(self, context: RequestContext) -> list[TeamResult]:
        """Teams of the context organization, current mode only."""
        stmt = in_current_organization(select(Team), Team, context)
        stmt = only_current_mode(stmt, Team, self.mode).order_by(Team.name)
        result = await self.db.execute(stmt)
        return [team_to_result(t) for t in result.scalars().all()]

    async def get_in_organization(self, team_id: str, organization_id: str) -> Team | None:
        """Team by id if it belongs to organization_id and the current mode."""
        stmt = select(Team).where(Team.id == team_id, Team.organization_id == organization_id)
        result = await self.db.execute(only_current_mode(stmt, Team, self.mode))
        return result.scalar_one_or_none()

    async def has_member(self, team_id: str, user_id: str) -> bool:
        result = await self.db.execute(
            select(TeamMember.id).where(
                TeamMember.team_id == team_id, TeamMember.user_id == user_id
            )
        )
        return result.first() is not None

    async def create_team(self, name: str, console_team_id: str | None = None) -> TeamResult:
        created = await self.create(Team(name=name, console_team_id=console_team_id))
        return team_to_result(created)

    async def add_member(self, team_id: str, user_id: str) -> bool:
        """Add user to team. Idempotent; returns False when already a member."""
        if await self.has_member(team_id, user_id):
            return False
        try:
            async with self.db.begin_nested():
                self.db.add(TeamMember(team_id=team_id, user_id=user_id))
                await self.db.flush()
        except IntegrityError:
            return False
        return True

    async def remove_member(self, team_id: str, user_id: str) -> int:
        result = await self.db.execute(
            delete(TeamMember).where(
                TeamMember.team_id == team_id, TeamMember.user_id == user_id
            )
        )
        return result.rowcount or 0

    async def sync_permissions(self, team_id: str, permission_ids: list[str]) -> None:
        """Make permission_ids the exact permission set of the team."""
        async with self.db.begin_nested():
            await self.db.execute(
                delete(TeamPermission).where(TeamPermission.team_id == team_id)
            )
            for permission_id in dict.fromkeys(permission_ids):
                self.db.add(TeamPermission(team_id=team_id, permission_id=permission_id))
            await self.db.flush()

    async def names_by_id(self, team_ids: list[str]) -> dict[str, str]:
        if not team_ids:
            return {}
        result = await self.db.execute(select(Team.id, Team.name).where(Team.id.in_(team_ids)))
        return dict(result.all())


class LocationRepository(BaseRepository[Location]):
    """Location repository. Lists are narrowed to the context branch when one is set."""

    def __init__(self, db: AsyncSession, mode: AuthMode | None = None) -> None:
        super().__init__(db, Location)
        self.mode = mode

    async def list_in_context(self, context: RequestContext) -> list[LocationResult]:
        stmt = in_current_context(select(Location), Location, context)
        stmt = only_current_mode(stmt, Location, self.mode).order_by(Location.code)
        result = await self.db.execute(stmt)
        return [location_to_result(loc) for loc in result.scalars().all()]

    async def create_location(
        self, name: str, code: str, address: str | None = None
    ) -> LocationResult:
        created = await self.create(Location(name=name, code=code, address=address))
        return location_to_result(created)
