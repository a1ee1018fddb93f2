"""RoleAssignment repository: the (user, role, scope) store.

Assignment identity is (user, role, organization, branch): the same role may
be held by one user at several scopes. Writes validate the scope before
touching the database; reads resolve the effective scope chain in SQL.
"""

from __future__ import annotations

import logging

from sqlalchemy import ColumnElement, and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.assignment import RoleAssignmentResult
from scopegate.application.dtos.role import RoleResult
from scopegate.domain.exceptions import InvalidScopeException, RoleNotFoundException
from scopegate.domain.value_objects import ScopeRef
from scopegate.infrastructure.persistence.models.role import Role
from scopegate.infrastructure.persistence.models.role_assignment import RoleAssignment
from scopegate.infrastructure.persistence.repositories.role_repo import (
    RoleRepository,
    role_to_result,
)
from scopegate.infrastructure.persistence.scope_resolver import effective_scope_clause

logger = logging.getLogger(__name__)

RoleRef = Role | RoleResult | str


def assignment_to_result(a: RoleAssignment) -> RoleAssignmentResult:
    """Map ORM RoleAssignment (role eagerly loaded) to RoleAssignmentResult."""
    return RoleAssignmentResult(
        id=a.id,
        user_id=a.user_id,
        role=role_to_result(a.role),
        organization_id=a.organization_id,
        branch_id=a.branch_id,
        created_at=a.created_at,
    )


def _exact_scope(scope: ScopeRef) -> ColumnElement[bool]:
    """Match exactly this (organization, branch) pair; nulls match nulls."""
    org_cond = (
        RoleAssignment.organization_id.is_(None)
        if scope.organization_id is None
        else RoleAssignment.organization_id == scope.organization_id
    )
    branch_cond = (
        RoleAssignment.branch_id.is_(None)
        if scope.branch_id is None
        else RoleAssignment.branch_id == scope.branch_id
    )
    return and_(org_cond, branch_cond)


class RoleAssignmentRepository:
    """User-role-scope rows. Never cached; every read hits the database."""

    def __init__(self, db: AsyncSession, role_repo: RoleRepository | None = None) -> None:
        self.db = db
        self._roles = role_repo or RoleRepository(db)

    async def _resolve_role(self, role: RoleRef, organization_id: str | None) -> Role:
        """Role instance, RoleResult or slug -> attached Role; RoleNotFoundException if absent."""
        if isinstance(role, Role):
            return role
        if isinstance(role, RoleResult):
            found = await self._roles.get_by_id(role.id)
            if found is None:
                raise RoleNotFoundException(role.id)
            return found
        found = await self._roles.find_by_slug(role, organization_id)
        if found is None:
            raise RoleNotFoundException(role)
        return found

    @staticmethod
    def _check_owner(role: Role, scope: ScopeRef) -> None:
        """An organization-owned role is only assignable inside that organization."""
        if role.organization_id is not None and role.organization_id != scope.organization_id:
            raise InvalidScopeException(
                f"Role '{role.slug}' belongs to another organization",
                organization_id=scope.organization_id,
                branch_id=scope.branch_id,
            )

    async def _exists(self, user_id: str, role_id: str, scope: ScopeRef) -> bool:
        result = await self.db.execute(
            select(RoleAssignment.id).where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.role_id == role_id,
                _exact_scope(scope),
            )
        )
        return result.first() is not None

    async def assign(
        self,
        user_id: str,
        role: RoleRef,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """Grant role to user at (organization_id, branch_id). Idempotent.

        Returns:
            True when a row was written, False when it already existed
            (including losing a race against a concurrent identical assign).

        Raises:
            InvalidScopeException: branch without organization, or a role owned
                by another organization.
            RoleNotFoundException: role slug/id does not resolve.
        """
        scope = ScopeRef(organization_id, branch_id)
        role_obj = await self._resolve_role(role, scope.organization_id)
        self._check_owner(role_obj, scope)
        if await self._exists(user_id, role_obj.id, scope):
            return False
        try:
            async with self.db.begin_nested():
                self.db.add(
                    RoleAssignment(
                        user_id=user_id,
                        role_id=role_obj.id,
                        organization_id=scope.organization_id,
                        branch_id=scope.branch_id,
                    )
                )
                await self.db.flush()
        except IntegrityError:
            if await self._exists(user_id, role_obj.id, scope):
                logger.info(
                    "Role %s already assigned to user %s at %s (concurrent insert)",
                    role_obj.slug,
                    user_id,
                    scope.scope_type.value,
                )
                return False
            raise
        logger.info(
            "Assigned role %s to user %s (%s org=%s branch=%s)",
            role_obj.slug,
            user_id,
            scope.scope_type.value,
            scope.organization_id,
            scope.branch_id,
        )
        return True

    async def remove(
        self,
        user_id: str,
        role: RoleRef,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> int:
        """Delete the assignment at exactly (organization_id, branch_id).

        Assignments of the same role at other scopes are untouched.

        Returns:
            Number of rows deleted (0 or 1).
        """
        scope = ScopeRef(organization_id, branch_id)
        role_obj = await self._resolve_role(role, scope.organization_id)
        result = await self.db.execute(
            delete(RoleAssignment).where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.role_id == role_obj.id,
                _exact_scope(scope),
            )
        )
        if result.rowcount:
            logger.info(
                "Removed role %s from user %s (%s org=%s branch=%s)",
                role_obj.slug,
                user_id,
                scope.scope_type.value,
                scope.organization_id,
                scope.branch_id,
            )
        return result.rowcount or 0

    async def list_for_context(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[RoleAssignmentResult]:
        """Assignments effective in the context (global, org-wide, exact branch)."""
        result = await self.db.execute(
            select(RoleAssignment)
            .where(
                RoleAssignment.user_id == user_id,
                effective_scope_clause(RoleAssignment, organization_id, branch_id),
            )
            .order_by(RoleAssignment.id)
        )
        return [assignment_to_result(a) for a in result.scalars().all()]

    async def list_for_user(
        self, user_id: str, organization_id: str | None = None
    ) -> list[RoleAssignmentResult]:
        """Every assignment of the user.

        With organization_id, only global ones and that organization's.
        """
        stmt = select(RoleAssignment).where(RoleAssignment.user_id == user_id)
        if organization_id is not None:
            stmt = stmt.where(
                or_(
                    RoleAssignment.organization_id.is_(None),
                    RoleAssignment.organization_id == organization_id,
                )
            )
        result = await self.db.execute(stmt.order_by(RoleAssignment.id))
        return [assignment_to_result(a) for a in result.scalars().all()]

    async def highest_level(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> int:
        """Maximum level among effective roles; 0 when none is effective."""
        result = await self.db.execute(
            select(func.coalesce(func.max(Role.level), 0))
            .select_from(RoleAssignment)
            .join(Role, Role.id == RoleAssignment.role_id)
            .where(
                RoleAssignment.user_id == user_id,
                effective_scope_clause(RoleAssignment, organization_id, branch_id),
            )
        )
        return int(result.scalar_one())

    async def has_role(
        self,
        user_id: str,
        slug: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """True if a role with this slug is effective for the user in the context."""
        result = await self.db.execute(
            select(RoleAssignment.id)
            .join(Role, Role.id == RoleAssignment.role_id)
            .where(
                RoleAssignment.user_id == user_id,
                Role.slug == slug,
                effective_scope_clause(RoleAssignment, organization_id, branch_id),
            )
            .limit(1)
        )
        return result.first() is not None

    async def replace_in_scope(
        self,
        user_id: str,
        roles: list[RoleRef],
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[RoleResult]:
        """Make roles the user's exact role set at (organization_id, branch_id).

        Roles are resolved and validated before any write; detach and
        re-attach run inside one SAVEPOINT so the scope is never observed
        empty. Other scopes are untouched.
        """
        scope = ScopeRef(organization_id, branch_id)
        resolved: dict[str, Role] = {}
        for ref in roles:
            role_obj = await self._resolve_role(ref, scope.organization_id)
            self._check_owner(role_obj, scope)
            resolved.setdefault(role_obj.id, role_obj)
        async with self.db.begin_nested():
            await self.db.execute(
                delete(RoleAssignment).where(
                    RoleAssignment.user_id == user_id,
                    _exact_scope(scope),
                )
            )
            for role_obj in resolved.values():
                self.db.add(
                    RoleAssignment(
                        user_id=user_id,
                        role_id=role_obj.id,
                        organization_id=scope.organization_id,
                        branch_id=scope.branch_id,
                    )
                )
            await self.db.flush()
        logger.info(
            "Replaced roles of user %s at %s (org=%s branch=%s): %s",
            user_id,
            scope.scope_type.value,
            scope.organization_id,
            scope.branch_id,
            [r.slug for r in resolved.values()],
        )
        return [role_to_result(r) for r in resolved.values()]
