"""Role repository. Read methods return RoleResult (DTO); entity getters return ORM for writes."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.role import RoleResult
from scopegate.domain.enums import RoleScopeFilter
from scopegate.domain.exceptions import DuplicateRoleException, MissingContextException
from scopegate.infrastructure.persistence.models.role import Role
from scopegate.infrastructure.persistence.repositories.base import BaseRepository


def role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        slug=r.slug,
        level=r.level,
        description=r.description,
        organization_id=r.organization_id,
    )


def _owner_clause(organization_id: str | None):
    if organization_id is None:
        return Role.organization_id.is_(None)
    return Role.organization_id == organization_id


class RoleRepository(BaseRepository[Role]):
    """Role repository. Slugs are unique per owner partition (null = global)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_result(self, role_id: str) -> RoleResult | None:
        role = await self.get_by_id(role_id)
        return role_to_result(role) if role else None

    async def get_visible(self, role_id: str, organization_id: str | None) -> Role | None:
        """Role by id if it is global or owned by organization_id."""
        result = await self.db.execute(
            select(Role).where(
                Role.id == role_id,
                or_(Role.organization_id.is_(None), _owner_clause(organization_id)),
            )
        )
        return result.scalar_one_or_none()

    async def find_by_slug(
        self, slug: str, organization_id: str | None = None
    ) -> Role | None:
        """Resolve a slug: a role owned by organization_id wins over a global one."""
        if organization_id is not None:
            result = await self.db.execute(
                select(Role).where(Role.slug == slug, Role.organization_id == organization_id)
            )
            owned = result.scalar_one_or_none()
            if owned is not None:
                return owned
        result = await self.db.execute(
            select(Role).where(Role.slug == slug, Role.organization_id.is_(None))
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, organization_id: str | None) -> bool:
        result = await self.db.execute(
            select(Role.id).where(Role.slug == slug, _owner_clause(organization_id))
        )
        return result.first() is not None

    async def list_roles(
        self,
        scope_filter: RoleScopeFilter = RoleScopeFilter.ALL,
        organization_id: str | None = None,
    ) -> list[RoleResult]:
        """Roles ordered by level (desc) then name.

        ALL: global roles plus those owned by organization_id (if given).
        GLOBAL: global roles only. ORGANIZATION: roles owned by organization_id.
        """
        stmt = select(Role)
        if scope_filter is RoleScopeFilter.GLOBAL:
            stmt = stmt.where(Role.organization_id.is_(None))
        elif scope_filter is RoleScopeFilter.ORGANIZATION:
            if organization_id is None:
                raise MissingContextException("organization")
            stmt = stmt.where(Role.organization_id == organization_id)
        elif organization_id is not None:
            stmt = stmt.where(
                or_(Role.organization_id.is_(None), Role.organization_id == organization_id)
            )
        else:
            stmt = stmt.where(Role.organization_id.is_(None))
        result = await self.db.execute(stmt.order_by(Role.level.desc(), Role.name))
        return [role_to_result(r) for r in result.scalars().all()]

    async def create_role(
        self,
        name: str,
        slug: str,
        level: int,
        description: str | None = None,
        organization_id: str | None = None,
    ) -> RoleResult:
        """Create a role; a concurrent duplicate slug surfaces as DuplicateRoleException."""
        role = Role(
            name=name,
            slug=slug,
            level=level,
            description=description,
            organization_id=organization_id,
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(role)
        except IntegrityError:
            raise DuplicateRoleException(slug, organization_id) from None
        return role_to_result(created)

    async def update_role(
        self,
        role: Role,
        *,
        name: str | None = None,
        level: int | None = None,
        description: str | None = None,
    ) -> RoleResult:
        """Update mutable fields. The slug and owner never change."""
        if name is not None:
            role.name = name
        if level is not None:
            role.level = level
        if description is not None:
            role.description = description
        updated = await self.update(role)
        return role_to_result(updated)
