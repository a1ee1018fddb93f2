"""Route gates: permission, role and context requirements.

Every gate is a dependency (or dependency factory) evaluated against the
verified request context. Declare on a route as
``_: Annotated[object, Depends(require_permission("orders.view"))] = None``
or use the returned UserResult directly.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from scopegate.application.dtos.user import UserResult
from scopegate.application.services import AuthorizationService
from scopegate.core.config import get_settings
from scopegate.core.request_context import RequestContext
from scopegate.domain.exceptions import AuthorizationException, MissingContextException

from .auth import get_current_user
from .context import get_request_context
from .db import get_authorization_service

logger = logging.getLogger(__name__)


def require_permission(permission: str):
    """Dependency factory: the caller holds permission in the request context."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        context: Annotated[RequestContext, Depends(get_request_context)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        if not await auth_svc.check_access(current_user.id, permission, context):
            raise AuthorizationException(permission)
        return current_user

    return _require


def require_any_permission(*permissions: str):
    """Dependency factory: the caller holds at least one of permissions."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        context: Annotated[RequestContext, Depends(get_request_context)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        allowed = await auth_svc.has_any_permission(
            current_user.id, permissions, context.organization_id, context.branch_id
        )
        if not allowed:
            raise AuthorizationException(
                message="Permission denied",
                details={"any_of": list(permissions)},
            )
        return current_user

    return _require


def require_role(slug: str):
    """Dependency factory: the caller holds role slug, or a role whose level reaches it.

    The minimum level is settings.role_levels[slug]; a slug without a
    configured level must be held exactly.
    """

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        context: Annotated[RequestContext, Depends(get_request_context)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        org_id, branch_id = context.organization_id, context.branch_id
        if await auth_svc.has_role_in_context(current_user.id, slug, org_id, branch_id):
            return current_user
        minimum = get_settings().role_levels.get(slug)
        if minimum is not None:
            level = await auth_svc.get_highest_role_level_in_context(
                current_user.id, org_id, branch_id
            )
            if level >= minimum:
                return current_user
        logger.info(
            "User %s lacks role %s (org=%s branch=%s)",
            current_user.id,
            slug,
            org_id,
            branch_id,
        )
        raise AuthorizationException(message=f"Role required: {slug}", details={"role": slug})

    return _require


async def require_organization(
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> RequestContext:
    """Context must name an organization (400 MISSING_CONTEXT otherwise)."""
    if not context.has_organization():
        raise MissingContextException("organization")
    return context


async def require_branch(
    context: Annotated[RequestContext, Depends(require_organization)],
) -> RequestContext:
    """Context must name an organization and a branch."""
    if not context.has_branch():
        raise MissingContextException("branch")
    return context
