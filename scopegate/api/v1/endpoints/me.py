"""Current caller: resolved context, effective roles and permissions."""

from typing import Annotated

from fastapi import APIRouter, Depends

from scopegate.api.v1.dependencies import (
    get_authorization_service,
    get_current_user,
    get_request_context,
)
from scopegate.application.dtos.user import UserResult
from scopegate.application.services import AuthorizationService
from scopegate.core.config import get_settings
from scopegate.core.request_context import RequestContext
from scopegate.schemas.context import ContextResponse, MeContextResponse
from scopegate.schemas.role import RoleResponse

router = APIRouter()


@router.get("/context", response_model=MeContextResponse)
async def get_my_context(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
):
    """Context after access checks, roles effective in it and the permissions they grant."""
    org_id, branch_id = context.organization_id, context.branch_id
    roles = await auth_svc.get_roles_for_context(current_user.id, org_id, branch_id)
    permissions = await auth_svc.get_all_permissions(current_user.id, org_id, branch_id)
    return MeContextResponse(
        user_id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        mode=get_settings().auth_mode,
        context=ContextResponse(**context.to_dict()),
        roles=[RoleResponse.model_validate(r) for r in roles],
        highest_role_level=max((r.level for r in roles), default=0),
        permissions=sorted(permissions),
    )
