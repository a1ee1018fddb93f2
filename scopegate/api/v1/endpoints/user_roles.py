"""User-roles API: scoped role assignments of a user and their permission breakdown.

All routes require the admin role in the request context.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from scopegate.api.v1.dependencies import (
    get_user_role_service,
    get_user_role_service_for_write,
    require_role,
)
from scopegate.application.services import UserRoleService
from scopegate.core.limiter import limit_writes
from scopegate.schemas.assignment import (
    AssignmentResponse,
    AssignResultResponse,
    AssignRoleRequest,
    PermissionsBreakdownResponse,
    SyncRolesRequest,
)
from scopegate.schemas.role import RoleResponse

router = APIRouter()


@router.get("/{user_id}/roles", response_model=list[AssignmentResponse])
async def list_user_roles(
    user_id: str,
    user_role_svc: Annotated[UserRoleService, Depends(get_user_role_service)],
    organization_id: str | None = Query(default=None, max_length=36),
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Every assignment of the user, broadest scope first.

    With organization_id only global assignments and that organization's are listed.
    """
    details = await user_role_svc.list_assignments(user_id, organization_id)
    return [AssignmentResponse.from_detail(d) for d in details]


@router.post(
    "/{user_id}/roles",
    response_model=AssignResultResponse,
    status_code=201,
    responses={200: {"description": "Assignment already existed", "model": AssignResultResponse}},
)
@limit_writes
async def assign_user_role(
    request: Request,
    response: Response,
    user_id: str,
    body: AssignRoleRequest,
    user_role_svc: Annotated[UserRoleService, Depends(get_user_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Assign a role at a scope. 201 when created, 200 when it already existed."""
    created = await user_role_svc.assign(
        user_id,
        role_id=body.role_id,
        role_slug=body.role_slug,
        organization_id=body.organization_id,
        branch_id=body.branch_id,
    )
    if not created:
        response.status_code = 200
    return AssignResultResponse(created=created)


@router.put("/{user_id}/roles", response_model=list[RoleResponse])
@limit_writes
async def sync_user_roles(
    request: Request,
    user_id: str,
    body: SyncRolesRequest,
    user_role_svc: Annotated[UserRoleService, Depends(get_user_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Replace the user's roles at exactly this scope; other scopes are untouched."""
    roles = await user_role_svc.sync(
        user_id, body.roles, body.organization_id, body.branch_id
    )
    return [RoleResponse.model_validate(r) for r in roles]


@router.delete("/{user_id}/roles/{role_id}", status_code=204)
@limit_writes
async def remove_user_role(
    request: Request,
    user_id: str,
    role_id: str,
    user_role_svc: Annotated[UserRoleService, Depends(get_user_role_service_for_write)],
    organization_id: str | None = Query(default=None, max_length=36),
    branch_id: str | None = Query(default=None, max_length=36),
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Remove the assignment at exactly (organization_id, branch_id). 404 when absent."""
    await user_role_svc.remove(user_id, role_id, organization_id, branch_id)
    return None


@router.get("/{user_id}/permissions-breakdown", response_model=PermissionsBreakdownResponse)
async def get_permissions_breakdown(
    user_id: str,
    user_role_svc: Annotated[UserRoleService, Depends(get_user_role_service)],
    organization_id: str | None = Query(default=None, max_length=36),
    branch_id: str | None = Query(default=None, max_length=36),
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Effective permissions of the user at (organization_id, branch_id) with their sources."""
    breakdown = await user_role_svc.get_permissions_breakdown(
        user_id, organization_id, branch_id
    )
    return PermissionsBreakdownResponse.model_validate(breakdown)
