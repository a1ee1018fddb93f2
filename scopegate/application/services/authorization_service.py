"""Authorization service: scoped role and permission checks with caching.

Effective roles come from the assignment store (never cached). Permission
slugs per role, per team and a user's team ids per organization are
cached through the cache port; a cache failure only costs a recompute.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from scopegate.application.dtos.role import RoleResult
from scopegate.application.interfaces.services import (
    IAssignmentStore,
    ICacheService,
    IPermissionResolver,
)
from scopegate.core.request_context import RequestContext
from scopegate.infrastructure.cache.keys import (
    org_access_key,
    role_permissions_key,
    team_permissions_key,
    user_teams_key,
)
from scopegate.infrastructure.cache.redis_cache import remember
from scopegate.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centralized permission checking for (user, organization, branch) contexts."""

    def __init__(
        self,
        assignment_store: IAssignmentStore,
        permission_resolver: IPermissionResolver,
        cache: ICacheService | None = None,
        *,
        role_permissions_ttl: int = 3600,
        team_permissions_ttl: int = 3600,
        user_teams_ttl: int = 300,
    ) -> None:
        self.assignment_store = assignment_store
        self.permission_resolver = permission_resolver
        self.cache = cache
        self.role_permissions_ttl = role_permissions_ttl
        self.team_permissions_ttl = team_permissions_ttl
        self.user_teams_ttl = user_teams_ttl

    async def get_roles_for_context(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[RoleResult]:
        """Distinct roles effective in the context, highest level first."""
        assignments = await self.assignment_store.list_for_context(
            user_id, organization_id, branch_id
        )
        roles: dict[str, RoleResult] = {}
        for assignment in assignments:
            roles.setdefault(assignment.role.id, assignment.role)
        return sorted(roles.values(), key=lambda r: (-r.level, r.name))

    async def has_role_in_context(
        self,
        user_id: str,
        slug: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        return await self.assignment_store.has_role(user_id, slug, organization_id, branch_id)

    async def get_highest_role_level_in_context(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> int:
        """Highest level among effective roles; 0 means no role."""
        return await self.assignment_store.highest_level(user_id, organization_id, branch_id)

    async def get_role_permissions(self, role_id: str) -> list[str]:
        """Permission slugs of one role (cached per role)."""
        return await remember(
            self.cache,
            role_permissions_key(role_id),
            self.role_permissions_ttl,
            lambda: self.permission_resolver.get_role_permission_slugs(role_id),
        )

    async def get_team_permissions(self, team_id: str) -> list[str]:
        """Permission slugs of one team (cached per team)."""
        return await remember(
            self.cache,
            team_permissions_key(team_id),
            self.team_permissions_ttl,
            lambda: self.permission_resolver.get_team_permission_slugs(team_id),
        )

    async def get_user_team_ids(self, user_id: str, organization_id: str) -> list[str]:
        """Team ids of the user inside one organization (cached per user and organization)."""
        return await remember(
            self.cache,
            user_teams_key(user_id, organization_id),
            self.user_teams_ttl,
            lambda: self.permission_resolver.get_user_team_ids(user_id, organization_id),
        )

    @traced("authorization.get_all_permissions")
    async def get_all_permissions(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> set[str]:
        """Union of role permissions in the context and, with an organization, team permissions."""
        permissions: set[str] = set()
        for role in await self.get_roles_for_context(user_id, organization_id, branch_id):
            permissions.update(await self.get_role_permissions(role.id))
        if organization_id is not None:
            for team_id in await self.get_user_team_ids(user_id, organization_id):
                permissions.update(await self.get_team_permissions(team_id))
        return permissions

    async def has_permission(
        self,
        user_id: str,
        permission: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        permissions = await self.get_all_permissions(user_id, organization_id, branch_id)
        return permission in permissions

    async def has_any_permission(
        self,
        user_id: str,
        permissions: Iterable[str],
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """True if at least one of permissions is granted; False for an empty list."""
        wanted = set(permissions)
        if not wanted:
            return False
        granted = await self.get_all_permissions(user_id, organization_id, branch_id)
        return not wanted.isdisjoint(granted)

    async def has_all_permissions(
        self,
        user_id: str,
        permissions: Iterable[str],
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """True if every distinct permission is granted; True for an empty list."""
        wanted = set(permissions)
        if not wanted:
            return True
        granted = await self.get_all_permissions(user_id, organization_id, branch_id)
        return wanted <= granted

    @traced("authorization.check_access")
    async def check_access(
        self, user_id: str, permission: str, context: RequestContext
    ) -> bool:
        """Route-gate entry point: permission in the request's organization/branch."""
        allowed = await self.has_permission(
            user_id, permission, context.organization_id, context.branch_id
        )
        if not allowed:
            logger.debug(
                "Permission %s denied for user %s (org=%s branch=%s)",
                permission,
                user_id,
                context.organization_id,
                context.branch_id,
            )
        return allowed

    async def invalidate_role(self, role_id: str) -> None:
        """Drop the cached permission set of a role (after its permissions change)."""
        if self.cache is not None and self.cache.is_available():
            await self.cache.delete(role_permissions_key(role_id))

    async def invalidate_team(self, team_id: str) -> None:
        if self.cache is not None and self.cache.is_available():
            await self.cache.delete(team_permissions_key(team_id))

    async def purge_user_organization(self, user_id: str, organization_id: str) -> None:
        """Drop the access record and team ids cached for (user, organization)."""
        if self.cache is None or not self.cache.is_available():
            return
        await self.cache.delete(org_access_key(user_id, organization_id))
        await self.cache.delete(user_teams_key(user_id, organization_id))
        logger.info("Purged cached access of user %s in %s", user_id, organization_id)
