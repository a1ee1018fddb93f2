"""User-role administration: list, assign, sync and remove scoped role assignments.

Also builds the permission breakdown (which role at which scope, or which
team, grants what) used by the admin screens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scopegate.application.dtos.assignment import (
    AssignmentDetail,
    PermissionsBreakdown,
    RoleAssignmentResult,
    RoleGrant,
    TeamGrant,
)
from scopegate.application.dtos.role import RoleResult
from scopegate.domain.exceptions import (
    AssignmentNotFoundException,
    ResourceNotFoundException,
    RoleNotFoundException,
    ValidationException,
)
from scopegate.domain.value_objects import ScopeRef
from scopegate.infrastructure.cache.keys import user_org_access_pattern

if TYPE_CHECKING:
    from scopegate.application.services.authorization_service import (
        AuthorizationService,
    )
    from scopegate.infrastructure.persistence.repositories import (
        BranchRepository,
        OrganizationRepository,
        RoleAssignmentRepository,
        RoleRepository,
        TeamRepository,
        UserRepository,
    )

logger = logging.getLogger(__name__)


class UserRoleService:
    """Admin operations over one user's role assignments."""

    def __init__(
        self,
        assignment_repo: RoleAssignmentRepository,
        role_repo: RoleRepository,
        user_repo: UserRepository,
        organization_repo: OrganizationRepository,
        branch_repo: BranchRepository,
        team_repo: TeamRepository,
        authorization: AuthorizationService,
    ) -> None:
        self._assignments = assignment_repo
        self._roles = role_repo
        self._users = user_repo
        self._organizations = organization_repo
        self._branches = branch_repo
        self._teams = team_repo
        self._authorization = authorization

    async def _require_user(self, user_id: str):
        user = await self._users.get_active_entity(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def _resolve_role(
        self, role_id: str | None, role_slug: str | None, organization_id: str | None
    ):
        if role_id:
            role = await self._roles.get_by_id(role_id)
            if role is None:
                raise RoleNotFoundException(role_id)
            return role
        if role_slug:
            role = await self._roles.find_by_slug(role_slug, organization_id)
            if role is None:
                raise RoleNotFoundException(role_slug)
            return role
        raise ValidationException("role_id or role_slug is required", field="role_id")

    async def _purge_access(self, user_id: str, scope: ScopeRef) -> None:
        """Cached access records carry the service role; drop the affected ones."""
        cache = self._authorization.cache
        if cache is None or not cache.is_available():
            return
        if scope.organization_id is None:
            await cache.delete_pattern(user_org_access_pattern(user_id))
        else:
            await self._authorization.purge_user_organization(user_id, scope.organization_id)

    async def _with_names(
        self, assignments: list[RoleAssignmentResult]
    ) -> list[AssignmentDetail]:
        org_names = await self._organizations.names_by_id(
            sorted({a.organization_id for a in assignments if a.organization_id})
        )
        branch_names = await self._branches.names_by_id(
            sorted({a.branch_id for a in assignments if a.branch_id})
        )
        return [
            AssignmentDetail(
                assignment=a,
                organization_name=org_names.get(a.organization_id) if a.organization_id else None,
                branch_name=branch_names.get(a.branch_id) if a.branch_id else None,
            )
            for a in assignments
        ]

    async def list_assignments(
        self, user_id: str, organization_id: str | None = None
    ) -> list[AssignmentDetail]:
        """Every assignment of the user, broadest first.

        With organization_id only global ones and that organization's are listed.
        """
        await self._require_user(user_id)
        assignments = await self._assignments.list_for_user(user_id, organization_id)
        assignments.sort(key=lambda a: a.scope.priority)
        return await self._with_names(assignments)

    async def assign(
        self,
        user_id: str,
        *,
        role_id: str | None = None,
        role_slug: str | None = None,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """Assign a role at a scope. Returns False when the assignment already existed."""
        scope = ScopeRef(organization_id, branch_id)
        await self._require_user(user_id)
        role = await self._resolve_role(role_id, role_slug, scope.organization_id)
        created = await self._assignments.assign(
            user_id, role, scope.organization_id, scope.branch_id
        )
        if created:
            await self._purge_access(user_id, scope)
        return created

    async def sync(
        self,
        user_id: str,
        roles: list[str],
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[RoleResult]:
        """Replace the user's roles at exactly this scope. roles are role ids or slugs."""
        scope = ScopeRef(organization_id, branch_id)
        await self._require_user(user_id)
        resolved = []
        for ref in roles:
            role = await self._roles.get_by_id(ref)
            if role is None:
                role = await self._resolve_role(None, ref, scope.organization_id)
            resolved.append(role)
        result = await self._assignments.replace_in_scope(
            user_id, resolved, scope.organization_id, scope.branch_id
        )
        await self._purge_access(user_id, scope)
        return result

    async def remove(
        self,
        user_id: str,
        role_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> None:
        """Remove the assignment at exactly this scope.

        Raises:
            AssignmentNotFoundException: no such assignment at that scope.
        """
        scope = ScopeRef(organization_id, branch_id)
        role = await self._resolve_role(role_id, None, scope.organization_id)
        deleted = await self._assignments.remove(
            user_id, role, scope.organization_id, scope.branch_id
        )
        if not deleted:
            raise AssignmentNotFoundException(
                user_id, role_id, scope.organization_id, scope.branch_id
            )
        await self._purge_access(user_id, scope)

    async def get_permissions_breakdown(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> PermissionsBreakdown:
        """Effective permissions in the context with the role or team that grants each.

        Role grants are ordered global, org-wide, branch. A slug granted by
        several roles appears under each of them; only the aggregate is
        deduplicated.
        """
        scope = ScopeRef(organization_id, branch_id)
        user = await self._require_user(user_id)
        assignments = await self._assignments.list_for_context(
            user_id, scope.organization_id, scope.branch_id
        )
        assignments.sort(key=lambda a: a.scope.priority)
        details = await self._with_names(assignments)

        aggregated: set[str] = set()
        role_grants: list[RoleGrant] = []
        for detail in details:
            a = detail.assignment
            permissions = await self._authorization.get_role_permissions(a.role.id)
            aggregated.update(permissions)
            role_grants.append(
                RoleGrant(
                    role=a.role,
                    scope=a.scope,
                    organization_id=a.organization_id,
                    organization_name=detail.organization_name,
                    branch_id=a.branch_id,
                    branch_name=detail.branch_name,
                    permissions=list(permissions),
                )
            )

        team_grants: list[TeamGrant] = []
        if scope.organization_id is not None:
            team_ids = await self._authorization.get_user_team_ids(
                user_id, scope.organization_id
            )
            team_names = await self._teams.names_by_id(team_ids)
            for team_id in team_ids:
                permissions = await self._authorization.get_team_permissions(team_id)
                aggregated.update(permissions)
                team_grants.append(
                    TeamGrant(
                        team_id=team_id,
                        team_name=team_names.get(team_id, team_id),
                        permissions=list(permissions),
                    )
                )

        return PermissionsBreakdown(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            organization_id=scope.organization_id,
            branch_id=scope.branch_id,
            role_assignments=role_grants,
            team_memberships=team_grants,
            aggregated_permissions=sorted(aggregated),
        )
