"""Request context dependencies.

ContextMiddleware leaves the unverified header values on request.state;
get_request_context checks them against the caller's organization access
and the branch table. get_context_db binds the result to the write
session so scoped rows created by the handler are filled from it.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.user import UserResult
from scopegate.application.services import ContextService, OrganizationAccessService
from scopegate.core.config import get_settings
from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import AuthMode
from scopegate.infrastructure.persistence.database import get_db, get_db_transactional
from scopegate.infrastructure.persistence.repositories import (
    BranchRepository,
    LocationRepository,
    OrganizationRepository,
    RoleAssignmentRepository,
    TeamRepository,
    UserRepository,
)
from scopegate.infrastructure.persistence.scoping import bind_auth_mode, bind_request_context

from .auth import get_bearer_token, get_current_user
from .db import (
    get_branch_repo_for_write,
    get_cache,
    get_console,
    get_organization_repo_for_write,
    get_user_repo_for_write,
)


def get_raw_context(request: Request) -> RequestContext:
    """Header context as parsed by ContextMiddleware (empty when it did not run)."""
    return getattr(request.state, "raw_context", None) or RequestContext()


async def get_organization_access_service(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    organization_repo: Annotated[
        OrganizationRepository, Depends(get_organization_repo_for_write)
    ],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
) -> OrganizationAccessService:
    settings = get_settings()
    return OrganizationAccessService(
        organization_repo=organization_repo,
        user_repo=user_repo,
        assignment_store=RoleAssignmentRepository(db),
        cache=get_cache(request),
        console=get_console(request),
        mode=AuthMode(settings.auth_mode),
        ttl=settings.cache_ttl_org_access,
    )


async def get_context_service(
    access_service: Annotated[
        OrganizationAccessService, Depends(get_organization_access_service)
    ],
    branch_repo: Annotated[BranchRepository, Depends(get_branch_repo_for_write)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> ContextService:
    settings = get_settings()
    return ContextService(
        access_service,
        branch_repo,
        TeamRepository(db),
        organization_wide_access_level=settings.organization_wide_access_level,
        fallback_to_hq=settings.branch_fallback_to_hq,
    )


async def get_request_context(
    raw: Annotated[RequestContext, Depends(get_raw_context)],
    current_user: Annotated[UserResult, Depends(get_current_user)],
    token: Annotated[str | None, Depends(get_bearer_token)],
    context_service: Annotated[ContextService, Depends(get_context_service)],
) -> RequestContext:
    """Verified context of the authenticated caller.

    Raises:
        OrganizationAccessDeniedException: no access to the header organization (403).
        InvalidScopeException: branch or team without organization, foreign
            branch or team, or a team the caller is not a member of (400).
    """
    return await context_service.resolve(current_user.id, raw, token)


async def get_context_db(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> AsyncSession:
    """Write session with the request context and operating mode bound for the flush hooks."""
    bind_request_context(db, context)
    bind_auth_mode(db, AuthMode(get_settings().auth_mode))
    return db


async def get_team_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TeamRepository:
    return TeamRepository(db)


async def get_team_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_context_db)],
) -> TeamRepository:
    """Team repository whose new teams take the context organization."""
    return TeamRepository(db)


async def get_location_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LocationRepository:
    return LocationRepository(db)


async def get_location_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_context_db)],
) -> LocationRepository:
    """Location repository whose new rows take the context organization and branch."""
    return LocationRepository(db)
