"""Request context resolution: organization access, branch and team validation, HQ fallback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scopegate.application.services.organization_access_service import (
    OrganizationAccessService,
)
from scopegate.core.request_context import RequestContext
from scopegate.domain.exceptions import (
    InvalidScopeException,
    OrganizationAccessDeniedException,
)

if TYPE_CHECKING:
    from scopegate.infrastructure.persistence.repositories import (
        BranchRepository,
        TeamRepository,
    )

logger = logging.getLogger(__name__)


class ContextService:
    """Turns the raw header context into the RequestContext handlers receive."""

    def __init__(
        self,
        access_service: OrganizationAccessService,
        branch_repo: BranchRepository,
        team_repo: TeamRepository,
        *,
        organization_wide_access_level: int = 80,
        fallback_to_hq: bool = False,
    ) -> None:
        self._access = access_service
        self._branches = branch_repo
        self._teams = team_repo
        self._org_wide_level = organization_wide_access_level
        self._fallback_to_hq = fallback_to_hq

    async def resolve(
        self,
        user_id: str,
        raw: RequestContext,
        bearer_token: str | None = None,
    ) -> RequestContext:
        """Validate raw against the user's access and the branch and team tables.

        Raises:
            InvalidScopeException: a branch or team without an organization, a
                branch or team that does not belong to the organization (or
                mode), or a team the user is not a member of (unless the user
                has organization-wide access).
            OrganizationAccessDeniedException: no access to the organization.
        """
        if raw.organization_id is None:
            if raw.branch_id is not None:
                raise InvalidScopeException(branch_id=raw.branch_id)
            if raw.team_id is not None:
                raise InvalidScopeException("A team requires an organization")
            return RequestContext(organization_wide_access_level=self._org_wide_level)

        access = await self._access.check_access(user_id, raw.organization_id, bearer_token)
        if access is None:
            logger.info("User %s denied access to organization %s", user_id, raw.organization_id)
            raise OrganizationAccessDeniedException(raw.organization_id)
        organization_id = access.organization_id

        branch_id: str | None = None
        branch_name: str | None = None
        if raw.branch_id is not None:
            branch = await self._branches.get_in_organization(raw.branch_id, organization_id)
            if branch is None:
                raise InvalidScopeException(
                    "Branch not found or does not belong to this organization",
                    organization_id=organization_id,
                    branch_id=raw.branch_id,
                )
            branch_id, branch_name = branch.id, branch.name
        elif self._fallback_to_hq:
            headquarters = await self._branches.get_headquarters(organization_id)
            if headquarters is not None:
                branch_id, branch_name = headquarters.id, headquarters.name

        team_id: str | None = None
        if raw.team_id is not None:
            team = await self._teams.get_in_organization(raw.team_id, organization_id)
            if team is None:
                raise InvalidScopeException(
                    "Team not found or does not belong to this organization",
                    organization_id=organization_id,
                )
            team_id = team.id

        context = RequestContext(
            organization_id=organization_id,
            branch_id=branch_id,
            team_id=team_id,
            organization_wide_access_level=self._org_wide_level,
            branch_name=branch_name,
        ).with_access(access.organization_role, access.service_role, access.service_role_level)

        if (
            team_id is not None
            and not context.has_organization_wide_access()
            and not await self._teams.has_member(team_id, user_id)
        ):
            logger.info("User %s is not a member of team %s", user_id, team_id)
            raise InvalidScopeException(
                "Not a member of this team", organization_id=organization_id
            )
        return context
