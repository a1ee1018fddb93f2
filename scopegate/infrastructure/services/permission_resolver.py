"""Resolves permission slugs granted by roles and teams (implements IPermissionResolver)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
    TeamPermission,
)
from scopegate.infrastructure.persistence.models.team import Team, TeamMember


class PermissionResolver:
    """Per-role and per-team slug lookups; callers cache the results."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_role_permission_slugs(self, role_id: str) -> list[str]:
        """Sorted permission slugs granted by one role."""
        query = (
            select(Permission.slug)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.slug)
        )
        result = await self.db.execute(query)
        return [row[0] for row in result.fetchall()]

    async def get_team_permission_slugs(self, team_id: str) -> list[str]:
        """Sorted permission slugs granted by one team."""
        query = (
            select(Permission.slug)
            .join(TeamPermission, TeamPermission.permission_id == Permission.id)
            .where(TeamPermission.team_id == team_id)
            .order_by(Permission.slug)
        )
        result = await self.db.execute(query)
        return [row[0] for row in result.fetchall()]

    async def get_user_team_ids(self, user_id: str, organization_id: str) -> list[str]:
        """Ids of the teams of organization_id the user belongs to."""
        query = (
            select(TeamMember.team_id)
            .join(Team, Team.id == TeamMember.team_id)
            .where(TeamMember.user_id == user_id, Team.organization_id == organization_id)
            .order_by(TeamMember.team_id)
        )
        result = await self.db.execute(query)
        return [row[0] for row in result.fetchall()]
