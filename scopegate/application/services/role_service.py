"""Role application service: role CRUD and role-permission sync."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scopegate.application.dtos.permission import PermissionResult
from scopegate.application.dtos.role import PermissionSyncResult, RoleResult
from scopegate.domain.enums import RoleScopeFilter
from scopegate.domain.exceptions import (
    DuplicateRoleException,
    ResourceNotFoundException,
    SystemRoleProtectedException,
    ValidationException,
)

if TYPE_CHECKING:
    from scopegate.application.services.authorization_service import (
        AuthorizationService,
    )
    from scopegate.infrastructure.persistence.repositories import (
        PermissionRepository,
        RolePermissionRepository,
        RoleRepository,
    )

logger = logging.getLogger(__name__)


def _validate_level(level: int) -> None:
    if level < 1:
        raise ValidationException("Role level must be >= 1", field="level")


class RoleService:
    """Roles visible to an organization are the global ones plus the ones it owns."""

    def __init__(
        self,
        role_repo: RoleRepository,
        permission_repo: PermissionRepository,
        role_permission_repo: RolePermissionRepository,
        authorization: AuthorizationService | None = None,
        system_role_slugs: list[str] | None = None,
    ) -> None:
        self._role_repo = role_repo
        self._permission_repo = permission_repo
        self._role_permission_repo = role_permission_repo
        self._authorization = authorization
        self._system_role_slugs = set(system_role_slugs or ())

    async def list_roles(
        self,
        organization_id: str | None = None,
        scope_filter: RoleScopeFilter = RoleScopeFilter.ALL,
    ) -> list[RoleResult]:
        return await self._role_repo.list_roles(scope_filter, organization_id)

    async def _get_visible(self, role_id: str, organization_id: str | None):
        role = await self._role_repo.get_visible(role_id, organization_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        return role

    async def get_role(self, role_id: str, organization_id: str | None = None) -> RoleResult:
        role = await self._get_visible(role_id, organization_id)
        return RoleResult(
            id=role.id,
            name=role.name,
            slug=role.slug,
            level=role.level,
            description=role.description,
            organization_id=role.organization_id,
        )

    async def create_role(
        self,
        name: str,
        slug: str,
        level: int,
        description: str | None = None,
        organization_id: str | None = None,
        permissions: list[str] | None = None,
    ) -> RoleResult:
        """Create a role (global when organization_id is None), optionally with permissions.

        Raises:
            ValidationException: level < 1 or an unknown permission.
            DuplicateRoleException: slug already used by the same owner.
        """
        _validate_level(level)
        if await self._role_repo.slug_exists(slug, organization_id):
            raise DuplicateRoleException(slug, organization_id)
        created = await self._role_repo.create_role(
            name=name,
            slug=slug,
            level=level,
            description=description,
            organization_id=organization_id,
        )
        if permissions:
            await self.sync_permissions(created.id, permissions, organization_id)
        logger.info("Created role %s (owner=%s, level=%s)", slug, organization_id, level)
        return created

    async def update_role(
        self,
        role_id: str,
        organization_id: str | None = None,
        *,
        name: str | None = None,
        level: int | None = None,
        description: str | None = None,
    ) -> RoleResult:
        if level is not None:
            _validate_level(level)
        role = await self._get_visible(role_id, organization_id)
        return await self._role_repo.update_role(
            role, name=name, level=level, description=description
        )

    async def delete_role(self, role_id: str, organization_id: str | None = None) -> None:
        """Delete a role; its assignments and permission links cascade.

        Raises:
            SystemRoleProtectedException: a built-in global role.
        """
        role = await self._get_visible(role_id, organization_id)
        if role.organization_id is None and role.slug in self._system_role_slugs:
            raise SystemRoleProtectedException(role.slug)
        await self._role_repo.delete(role)
        if self._authorization is not None:
            await self._authorization.invalidate_role(role_id)
        logger.info("Deleted role %s (%s)", role.slug, role_id)

    async def get_permissions(
        self, role_id: str, organization_id: str | None = None
    ) -> list[PermissionResult]:
        await self._get_visible(role_id, organization_id)
        return await self._role_permission_repo.get_permissions_for_role(role_id)

    async def sync_permissions(
        self,
        role_id: str,
        permissions: list[str],
        organization_id: str | None = None,
    ) -> PermissionSyncResult:
        """Replace the role's permission set. Entries are permission ids or slugs.

        Raises:
            ValidationException: an entry matches neither an id nor a slug.
        """
        await self._get_visible(role_id, organization_id)
        ids, missing_ids = await self._permission_repo.resolve_ids(ids=permissions)
        slug_ids, missing = await self._permission_repo.resolve_ids(slugs=missing_ids)
        if missing:
            raise ValidationException(
                f"Unknown permissions: {', '.join(missing)}", field="permissions"
            )
        result = await self._role_permission_repo.sync(
            role_id, list(dict.fromkeys(ids + slug_ids))
        )
        if self._authorization is not None:
            await self._authorization.invalidate_role(role_id)
        logger.info(
            "Synced permissions of role %s (+%s -%s)",
            role_id,
            result.attached,
            result.detached,
        )
        return result
