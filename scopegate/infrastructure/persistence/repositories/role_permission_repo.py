"""RolePermission repository: which permissions each role grants."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.permission import PermissionResult
from scopegate.application.dtos.role import PermissionSyncResult
from scopegate.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from scopegate.infrastructure.persistence.repositories.permission_repo import (
    permission_to_result,
)


class RolePermissionRepository:
    """Role-permission link table only."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_permissions_for_role(self, role_id: str) -> list[PermissionResult]:
        result = await self.db.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.group, Permission.slug)
        )
        return [permission_to_result(p) for p in result.scalars().all()]

    async def get_slugs_by_role(self, role_ids: list[str]) -> dict[str, list[str]]:
        """Map role id -> sorted permission slugs (roles without permissions map to [])."""
        if not role_ids:
            return {}
        slugs: dict[str, list[str]] = {role_id: [] for role_id in role_ids}
        result = await self.db.execute(
            select(RolePermission.role_id, Permission.slug)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(RolePermission.role_id.in_(role_ids))
            .order_by(Permission.slug)
        )
        for role_id, slug in result.all():
            slugs[role_id].append(slug)
        return dict(slugs)

    async def sync(self, role_id: str, permission_ids: list[str]) -> PermissionSyncResult:
        """Make permission_ids the exact permission set of role_id."""
        result = await self.db.execute(
            select(RolePermission.permission_id).where(RolePermission.role_id == role_id)
        )
        current = {row[0] for row in result.all()}
        wanted = set(permission_ids)
        to_detach = current - wanted
        to_attach = wanted - current
        async with self.db.begin_nested():
            if to_detach:
                await self.db.execute(
                    delete(RolePermission).where(
                        RolePermission.role_id == role_id,
                        RolePermission.permission_id.in_(to_detach),
                    )
                )
            for permission_id in sorted(to_attach):
                self.db.add(RolePermission(role_id=role_id, permission_id=permission_id))
            await self.db.flush()
        return PermissionSyncResult(attached=len(to_attach), detached=len(to_detach))

    async def get_role_ids_for_permission(self, permission_id: str) -> list[str]:
        result = await self.db.execute(
            select(RolePermission.role_id).where(
                RolePermission.permission_id == permission_id
            )
        )
        return [row[0] for row in result.all()]
