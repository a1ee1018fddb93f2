"""Roles API: list, get, create, update, delete, and role-permissions.

Reads are open to any authenticated caller and show the roles visible to
the context organization (global ones plus its own). Writes require the
admin role.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from scopegate.api.v1.dependencies import (
    get_request_context,
    get_role_service,
    get_role_service_for_write,
    require_role,
)
from scopegate.application.services import RoleService
from scopegate.core.limiter import limit_writes
from scopegate.core.request_context import RequestContext
from scopegate.domain.enums import RoleScopeFilter
from scopegate.schemas.permission import PermissionResponse
from scopegate.schemas.role import (
    PermissionSyncResponse,
    RoleCreateRequest,
    RolePermissionsSync,
    RoleResponse,
    RoleUpdate,
)

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
    scope: RoleScopeFilter = Query(default=RoleScopeFilter.ALL),
):
    """Roles visible in the context organization, highest level first."""
    roles = await role_svc.list_roles(context.organization_id, scope)
    return [RoleResponse.model_validate(r) for r in roles]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
):
    role = await role_svc.get_role(role_id, context.organization_id)
    return RoleResponse.model_validate(role)


@router.get("/{role_id}/permissions", response_model=list[PermissionResponse])
async def get_role_permissions(
    role_id: str,
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
):
    permissions = await role_svc.get_permissions(role_id, context.organization_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post("", response_model=RoleResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    role_svc: Annotated[RoleService, Depends(get_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Create a role (global when organization_id is null), optionally with permissions."""
    created = await role_svc.create_role(
        name=body.name,
        slug=body.slug,
        level=body.level,
        description=body.description,
        organization_id=body.organization_id,
        permissions=body.permissions,
    )
    return RoleResponse.model_validate(created)


@router.patch("/{role_id}", response_model=RoleResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdate,
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Update name, level or description. The slug is immutable."""
    updated = await role_svc.update_role(
        role_id,
        context.organization_id,
        name=body.name,
        level=body.level,
        description=body.description,
    )
    return RoleResponse.model_validate(updated)


@router.delete("/{role_id}", status_code=204)
@limit_writes
async def delete_role(
    request: Request,
    role_id: str,
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Delete a role. Built-in global roles return 409."""
    await role_svc.delete_role(role_id, context.organization_id)
    return None


@router.put("/{role_id}/permissions", response_model=PermissionSyncResponse)
@limit_writes
async def sync_role_permissions(
    request: Request,
    role_id: str,
    body: RolePermissionsSync,
    context: Annotated[RequestContext, Depends(get_request_context)],
    role_svc: Annotated[RoleService, Depends(get_role_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Replace the role's permission set (ids or slugs; unknown entries return 400)."""
    result = await role_svc.sync_permissions(role_id, body.permissions, context.organization_id)
    return PermissionSyncResponse.model_validate(result)
