"""Organization access: may this user act inside this organization, and with which service role.

Console mode asks the identity provider and mirrors the organization
locally; when the console cannot be reached the record is computed from
local data, the same way standalone mode always does. Records are cached
per (user, organization) for cache_ttl_org_access seconds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scopegate.application.dtos.access import OrganizationAccess
from scopegate.application.interfaces.services import (
    IAssignmentStore,
    ICacheService,
    IConsoleClient,
)
from scopegate.core.constants import DEFAULT_SERVICE_ROLE
from scopegate.domain.enums import AuthMode
from scopegate.infrastructure.cache.keys import org_access_key
from scopegate.infrastructure.exceptions import (
    ConsoleApiException,
    ConsoleUnavailableException,
)
from scopegate.shared.telemetry.tracing import traced

if TYPE_CHECKING:
    from scopegate.infrastructure.persistence.repositories import (
        OrganizationRepository,
        UserRepository,
    )

logger = logging.getLogger(__name__)


class OrganizationAccessService:
    """Resolves and caches OrganizationAccess records."""

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        user_repo: UserRepository,
        assignment_store: IAssignmentStore,
        cache: ICacheService | None = None,
        console: IConsoleClient | None = None,
        *,
        mode: AuthMode = AuthMode.STANDALONE,
        ttl: int = 300,
    ) -> None:
        self._organizations = organization_repo
        self._users = user_repo
        self._assignments = assignment_store
        self._cache = cache
        self._console = console
        self._mode = mode
        self._ttl = ttl

    @traced("organization_access.check_access")
    async def check_access(
        self,
        user_id: str,
        organization_id: str,
        bearer_token: str | None = None,
    ) -> OrganizationAccess | None:
        """Access record, or None when the user may not act in the organization.

        Denials are not cached.
        """
        key = org_access_key(user_id, organization_id)
        if self._cache is not None and self._cache.is_available():
            cached = await self._cache.get(key)
            if cached is not None:
                return OrganizationAccess.from_dict(cached)
        access = await self._resolve(user_id, organization_id, bearer_token)
        if access is not None and self._cache is not None and self._cache.is_available():
            await self._cache.set(key, access.to_dict(), ttl=self._ttl)
        return access

    async def _resolve(
        self, user_id: str, organization_id: str, bearer_token: str | None
    ) -> OrganizationAccess | None:
        if self._mode is AuthMode.CONSOLE and self._console is not None and bearer_token:
            try:
                payload = await self._console.get_organization_access(
                    bearer_token, organization_id
                )
            except (ConsoleUnavailableException, ConsoleApiException) as e:
                logger.warning(
                    "Console access check failed for organization %s, using local data: %s",
                    organization_id,
                    e.message,
                )
            else:
                if payload is None:
                    return None
                access = OrganizationAccess.from_dict(
                    {"organization_id": organization_id, **payload}
                )
                await self._organizations.upsert_from_access(access)
                return access
        return await self.check_access_local(user_id, organization_id)

    async def check_access_local(
        self, user_id: str, organization_id: str
    ) -> OrganizationAccess | None:
        """Local rule: the organization exists in this mode and is active, and the user
        belongs to it or holds an assignment scoped to it.

        The service role is the highest role effective organization-wide
        (global or org-wide assignments); branch-only roles do not count.
        """
        organization = await self._organizations.get_in_mode(organization_id)
        if organization is None or not organization.is_active:
            return None
        scoped = [
            a
            for a in await self._assignments.list_for_user(user_id, organization_id)
            if a.organization_id == organization_id
        ]
        if not scoped and not await self._users.is_member_of(user_id, organization_id):
            return None
        org_wide = await self._assignments.list_for_context(user_id, organization_id, None)
        top = max((a.role for a in org_wide), key=lambda r: r.level, default=None)
        service_role = top.slug if top else DEFAULT_SERVICE_ROLE
        return OrganizationAccess(
            organization_id=organization.id,
            organization_slug=organization.slug,
            organization_name=organization.name,
            organization_role=service_role,
            service_role=service_role,
            service_role_level=top.level if top else 0,
        )
