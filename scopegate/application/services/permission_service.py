"""Permission application service: catalogue CRUD, groups and the role/permission matrix."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scopegate.application.dtos.permission import PermissionMatrix, PermissionResult
from scopegate.domain.enums import RoleScopeFilter
from scopegate.domain.exceptions import (
    DuplicatePermissionException,
    ResourceNotFoundException,
)

if TYPE_CHECKING:
    from scopegate.infrastructure.persistence.repositories import (
        PermissionRepository,
        RolePermissionRepository,
        RoleRepository,
    )


class PermissionService:
    """Permissions are global; only roles and teams are organization-specific."""

    def __init__(
        self,
        permission_repo: PermissionRepository,
        role_repo: RoleRepository,
        role_permission_repo: RolePermissionRepository,
    ) -> None:
        self._permission_repo = permission_repo
        self._role_repo = role_repo
        self._role_permission_repo = role_permission_repo

    async def list_permissions(
        self, search: str | None = None, group: str | None = None
    ) -> list[PermissionResult]:
        return await self._permission_repo.list_permissions(search=search, group=group)

    async def list_groups(self) -> list[str]:
        return await self._permission_repo.list_groups()

    async def create_permission(
        self,
        name: str,
        slug: str,
        group: str | None = None,
        description: str | None = None,
    ) -> PermissionResult:
        if await self._permission_repo.get_by_slug(slug) is not None:
            raise DuplicatePermissionException(slug)
        return await self._permission_repo.create_permission(
            name=name, slug=slug, group=group, description=description
        )

    async def _get(self, permission_id: str):
        permission = await self._permission_repo.get_by_id(permission_id)
        if permission is None:
            raise ResourceNotFoundException("permission", permission_id)
        return permission

    async def update_permission(
        self,
        permission_id: str,
        *,
        name: str | None = None,
        group: str | None = None,
        description: str | None = None,
    ) -> PermissionResult:
        permission = await self._get(permission_id)
        return await self._permission_repo.update_permission(
            permission, name=name, group=group, description=description
        )

    async def delete_permission(self, permission_id: str) -> list[str]:
        """Delete a permission (links cascade). Returns ids of roles that granted it."""
        permission = await self._get(permission_id)
        role_ids = await self._role_permission_repo.get_role_ids_for_permission(permission_id)
        await self._permission_repo.delete(permission)
        return role_ids

    async def get_matrix(self, organization_id: str | None = None) -> PermissionMatrix:
        """Roles visible to organization_id against the slugs each grants."""
        roles = await self._role_repo.list_roles(RoleScopeFilter.ALL, organization_id)
        slugs = await self._role_permission_repo.get_slugs_by_role([r.id for r in roles])
        return PermissionMatrix(
            roles=roles,
            permissions=await self._permission_repo.list_permissions(),
            groups=await self._permission_repo.list_groups(),
            matrix={role.id: slugs.get(role.id, []) for role in roles},
        )
