"""Organization and Branch repositories. Reads are restricted to the current operating mode."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.access import OrganizationAccess
from scopegate.domain.enums import AuthMode
from scopegate.domain.exceptions import InvalidScopeException, ResourceNotFoundException
from scopegate.infrastructure.persistence.models.branch import Branch
from scopegate.infrastructure.persistence.models.organization import Organization
from scopegate.infrastructure.persistence.repositories.base import BaseRepository
from scopegate.infrastructure.persistence.scoping import only_current_mode

logger = logging.getLogger(__name__)


class OrganizationRepository(BaseRepository[Organization]):
    """Organization repository."""

    def __init__(self, db: AsyncSession, mode: AuthMode | None = None) -> None:
        super().__init__(db, Organization)
        self.mode = mode

    async def get_in_mode(self, organization_id: str) -> Organization | None:
        """Organization by id, created in the current mode and not soft-deleted."""
        stmt = select(Organization).where(
            Organization.id == organization_id, Organization.deleted_at.is_(None)
        )
        result = await self.db.execute(only_current_mode(stmt, Organization, self.mode))
        return result.scalar_one_or_none()

    async def names_by_id(self, organization_ids: list[str]) -> dict[str, str]:
        if not organization_ids:
            return {}
        result = await self.db.execute(
            select(Organization.id, Organization.name).where(
                Organization.id.in_(organization_ids)
            )
        )
        return dict(result.all())

    async def create_organization(self, name: str, slug: str, **kwargs) -> Organization:
        return await self.create(Organization(name=name, slug=slug, **kwargs))

    async def upsert_from_access(self, access: OrganizationAccess) -> Organization:
        """Mirror a console organization locally (id = console organization id)."""
        org = await self.get_by_id(access.organization_id)
        if org is None:
            org = Organization(
                id=access.organization_id,
                name=access.organization_name,
                slug=access.organization_slug,
                is_standalone=False,
            )
            org = await self.create(org)
            logger.info("Mirrored console organization %s", access.organization_id)
            return org
        if org.name != access.organization_name or org.slug != access.organization_slug:
            org.name = access.organization_name
            org.slug = access.organization_slug
            org = await self.update(org)
        return org


class BranchRepository(BaseRepository[Branch]):
    """Branch repository."""

    def __init__(self, db: AsyncSession, mode: AuthMode | None = None) -> None:
        super().__init__(db, Branch)
        self.mode = mode

    async def get_in_organization(
        self, branch_id: str, organization_id: str
    ) -> Branch | None:
        """Branch by id if it belongs to organization_id and the current mode."""
        stmt = select(Branch).where(
            Branch.id == branch_id, Branch.organization_id == organization_id
        )
        result = await self.db.execute(only_current_mode(stmt, Branch, self.mode))
        return result.scalar_one_or_none()

    async def get_headquarters(self, organization_id: str) -> Branch | None:
        """The organization's active headquarters branch, if any."""
        stmt = (
            select(Branch)
            .where(
                Branch.organization_id == organization_id,
                Branch.is_headquarters.is_(True),
                Branch.is_active.is_(True),
            )
            .order_by(Branch.created_at)
            .limit(1)
        )
        result = await self.db.execute(only_current_mode(stmt, Branch, self.mode))
        return result.scalar_one_or_none()

    async def names_by_id(self, branch_ids: list[str]) -> dict[str, str]:
        if not branch_ids:
            return {}
        result = await self.db.execute(
            select(Branch.id, Branch.name).where(Branch.id.in_(branch_ids))
        )
        return dict(result.all())

    async def create_branch(
        self,
        organization_id: str,
        name: str,
        slug: str,
        is_headquarters: bool = False,
    ) -> Branch:
        """Create a branch; the organization must exist in the same mode as the branch."""
        org = await self.db.get(Organization, organization_id)
        if org is None:
            raise ResourceNotFoundException("organization", organization_id)
        mode = self.mode or AuthMode.current()
        if org.is_standalone is not None and org.is_standalone != mode.is_standalone:
            raise InvalidScopeException(
                "Branch and organization must belong to the same mode",
                organization_id=organization_id,
            )
        branch = Branch(
            organization_id=organization_id,
            name=name,
            slug=slug,
            is_headquarters=is_headquarters,
            is_standalone=mode.is_standalone,
        )
        return await self.create(branch)
