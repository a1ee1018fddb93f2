"""Built-in RBAC catalogue: default permissions and the global system roles."""

from __future__ import annotations

import logging
from typing import TypedDict

from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.domain.exceptions import ResourceNotFoundException, RoleNotFoundException
from scopegate.infrastructure.persistence.repositories import (
    PermissionRepository,
    RoleAssignmentRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class RoleData(TypedDict):
    """Configuration of one default global role."""

    name: str
    description: str
    permissions: list[str]


# (slug, group, name)
SYSTEM_PERMISSIONS: list[tuple[str, str, str]] = [
    ("users.view", "users", "View users and their roles"),
    ("users.manage", "users", "Assign and remove user roles"),
    ("roles.view", "roles", "View roles"),
    ("roles.manage", "roles", "Create, update and delete roles"),
    ("permissions.manage", "permissions", "Manage the permission catalogue"),
    ("teams.view", "teams", "View teams"),
    ("teams.manage", "teams", "Create and manage teams"),
    ("locations.view", "locations", "View locations"),
    ("locations.manage", "locations", "Create and manage locations"),
    ("reports.view", "reports", "View reports"),
    ("reports.export", "reports", "Export reports"),
    ("settings.manage", "settings", "Manage organization settings"),
]

DEFAULT_ROLES: dict[str, RoleData] = {
    "admin": {
        "name": "Administrator",
        "description": "Full access to every organization and branch it is assigned to",
        "permissions": [slug for slug, _, _ in SYSTEM_PERMISSIONS],
    },
    "manager": {
        "name": "Manager",
        "description": "Manages teams, locations and reports",
        "permissions": [
            "users.view",
            "roles.view",
            "teams.view",
            "teams.manage",
            "locations.view",
            "locations.manage",
            "reports.view",
            "reports.export",
        ],
    },
    "member": {
        "name": "Member",
        "description": "Read access to teams, locations and reports",
        "permissions": ["teams.view", "locations.view", "reports.view"],
    },
}


class RbacInitializationService:
    """Seeds the permission catalogue and the global roles. Safe to run repeatedly.

    Existing permissions and roles are kept as they are; a default role only
    gains the default permissions it is missing, so grants added by an
    administrator survive a re-run.
    """

    def __init__(self, db: AsyncSession, role_levels: dict[str, int]) -> None:
        self.db = db
        self._role_levels = role_levels
        self._permissions = PermissionRepository(db)
        self._roles = RoleRepository(db)
        self._role_permissions = RolePermissionRepository(db)

    async def seed_permissions(self) -> int:
        """Create missing catalogue entries; returns how many were created."""
        created = 0
        for slug, group, name in SYSTEM_PERMISSIONS:
            if await self._permissions.get_by_slug(slug) is None:
                await self._permissions.create_permission(name=name, slug=slug, group=group)
                created += 1
        return created

    async def seed_roles(self) -> list[str]:
        """Create missing global default roles and top up their permissions.

        Roles without a configured level are skipped. Returns the slugs of
        the roles created.
        """
        created: list[str] = []
        for slug, data in DEFAULT_ROLES.items():
            level = self._role_levels.get(slug)
            if level is None:
                continue
            role = await self._roles.find_by_slug(slug)
            if role is None:
                result = await self._roles.create_role(
                    name=data["name"], slug=slug, level=level, description=data["description"]
                )
                role_id = result.id
                created.append(slug)
            else:
                role_id = role.id
            granted = await self._role_permissions.get_permissions_for_role(role_id)
            current = {p.slug for p in granted}
            ids, _ = await self._permissions.resolve_ids(
                slugs=sorted(current | set(data["permissions"]))
            )
            await self._role_permissions.sync(role_id, ids)
        return created

    async def initialize(self) -> None:
        permissions = await self.seed_permissions()
        roles = await self.seed_roles()
        logger.info(
            "RBAC catalogue seeded (%s new permissions, new roles: %s)",
            permissions,
            ", ".join(roles) or "none",
        )

    async def assign_admin_role(
        self, email: str, organization_id: str | None = None
    ) -> bool:
        """Give the user with this email the admin role (globally by default).

        Raises:
            ResourceNotFoundException: no user with that email.
            RoleNotFoundException: the admin role has not been seeded.
        """
        user = await UserRepository(self.db).get_by_email(email)
        if user is None:
            raise ResourceNotFoundException("user", email)
        admin = await self._roles.find_by_slug("admin", organization_id)
        if admin is None:
            raise RoleNotFoundException("admin")
        return await RoleAssignmentRepository(self.db, self._roles).assign(
            user.id, admin, organization_id
        )
