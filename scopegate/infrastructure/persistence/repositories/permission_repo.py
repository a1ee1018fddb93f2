"""Permission repository: the global permission catalogue."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.permission import PermissionResult
from scopegate.domain.exceptions import DuplicatePermissionException
from scopegate.infrastructure.persistence.models.permission import Permission
from scopegate.infrastructure.persistence.repositories.base import BaseRepository


def permission_to_result(p: Permission) -> PermissionResult:
    """Map ORM Permission to application PermissionResult."""
    return PermissionResult(
        id=p.id,
        name=p.name,
        slug=p.slug,
        group=p.group,
        description=p.description,
    )


class PermissionRepository(BaseRepository[Permission]):
    """Permission repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Permission)

    async def get_by_slug(self, slug: str) -> Permission | None:
        result = await self.db.execute(select(Permission).where(Permission.slug == slug))
        return result.scalar_one_or_none()

    async def list_permissions(
        self, search: str | None = None, group: str | None = None
    ) -> list[PermissionResult]:
        """Permissions ordered by group then slug; search matches name or slug."""
        stmt = select(Permission)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Permission.name.ilike(pattern), Permission.slug.ilike(pattern))
            )
        if group:
            stmt = stmt.where(Permission.group == group)
        result = await self.db.execute(stmt.order_by(Permission.group, Permission.slug))
        return [permission_to_result(p) for p in result.scalars().all()]

    async def list_groups(self) -> list[str]:
        """Distinct non-null group names, sorted."""
        result = await self.db.execute(
            select(Permission.group)
            .where(Permission.group.is_not(None))
            .distinct()
            .order_by(Permission.group)
        )
        return [row[0] for row in result.all()]

    async def resolve_ids(
        self, ids: list[str] | None = None, slugs: list[str] | None = None
    ) -> tuple[list[str], list[str]]:
        """Return (permission ids found, identifiers not found) for ids and/or slugs."""
        found: list[str] = []
        missing: list[str] = []
        if ids:
            result = await self.db.execute(select(Permission.id).where(Permission.id.in_(ids)))
            existing = {row[0] for row in result.all()}
            found.extend(i for i in ids if i in existing)
            missing.extend(i for i in ids if i not in existing)
        if slugs:
            result = await self.db.execute(
                select(Permission.slug, Permission.id).where(Permission.slug.in_(slugs))
            )
            by_slug = dict(result.all())
            found.extend(by_slug[s] for s in slugs if s in by_slug)
            missing.extend(s for s in slugs if s not in by_slug)
        return list(dict.fromkeys(found)), missing

    async def create_permission(
        self,
        name: str,
        slug: str,
        group: str | None = None,
        description: str | None = None,
    ) -> PermissionResult:
        permission = Permission(name=name, slug=slug, group=group, description=description)
        try:
            async with self.db.begin_nested():
                created = await self.create(permission)
        except IntegrityError:
            raise DuplicatePermissionException(slug) from None
        return permission_to_result(created)

    async def update_permission(
        self,
        permission: Permission,
        *,
        name: str | None = None,
        group: str | None = None,
        description: str | None = None,
    ) -> PermissionResult:
        """Update mutable fields. The slug never changes."""
        if name is not None:
            permission.name = name
        if group is not None:
            permission.group = group
        if description is not None:
            permission.description = description
        updated = await self.update(permission)
        return permission_to_result(updated)
