"""Permissions API: catalogue listing, groups, role/permission matrix and admin CRUD."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from scopegate.api.v1.dependencies import (
    get_authorization_service_for_write,
    get_current_user,
    get_permission_service,
    get_permission_service_for_write,
    get_request_context,
    require_role,
)
from scopegate.application.services import AuthorizationService, PermissionService
from scopegate.core.limiter import limit_writes
from scopegate.core.request_context import RequestContext
from scopegate.schemas.permission import (
    PermissionCreateRequest,
    PermissionMatrixResponse,
    PermissionResponse,
    PermissionUpdate,
)

router = APIRouter()


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
    search: str | None = Query(default=None, max_length=100),
    group: str | None = Query(default=None, max_length=100),
    _: Annotated[object, Depends(get_current_user)] = None,
):
    """List permissions ordered by group then slug. search matches name or slug."""
    permissions = await permission_svc.list_permissions(search=search, group=group)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get("/groups", response_model=list[str])
async def list_permission_groups(
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[object, Depends(get_current_user)] = None,
):
    return await permission_svc.list_groups()


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    context: Annotated[RequestContext, Depends(get_request_context)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
):
    """Roles visible in the context organization against the slugs each grants."""
    matrix = await permission_svc.get_matrix(context.organization_id)
    return PermissionMatrixResponse.model_validate(matrix)


@router.post("", response_model=PermissionResponse, status_code=201)
@limit_writes
async def create_permission(
    request: Request,
    body: PermissionCreateRequest,
    permission_svc: Annotated[PermissionService, Depends(get_permission_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    created = await permission_svc.create_permission(
        name=body.name, slug=body.slug, group=body.group, description=body.description
    )
    return PermissionResponse.model_validate(created)


@router.patch("/{permission_id}", response_model=PermissionResponse)
@limit_writes
async def update_permission(
    request: Request,
    permission_id: str,
    body: PermissionUpdate,
    permission_svc: Annotated[PermissionService, Depends(get_permission_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Update name, group or description. The slug is immutable."""
    updated = await permission_svc.update_permission(
        permission_id, name=body.name, group=body.group, description=body.description
    )
    return PermissionResponse.model_validate(updated)


@router.delete("/{permission_id}", status_code=204)
@limit_writes
async def delete_permission(
    request: Request,
    permission_id: str,
    permission_svc: Annotated[PermissionService, Depends(get_permission_service_for_write)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service_for_write)],
    _: Annotated[object, Depends(require_role("admin"))] = None,
):
    """Delete a permission and drop the cached permission sets of roles that granted it."""
    for role_id in await permission_svc.delete_permission(permission_id):
        await auth_svc.invalidate_role(role_id)
    return None
