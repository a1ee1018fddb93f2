"""Schemas for the caller's resolved context (GET /me/context)."""

from pydantic import BaseModel

from scopegate.schemas.role import RoleResponse


class ContextResponse(BaseModel):
    organization_id: str | None
    branch_id: str | None
    branch_name: str | None
    team_id: str | None
    organization_role: str | None
    service_role: str | None
    service_role_level: int
    has_organization_wide_access: bool


class MeContextResponse(BaseModel):
    """Who the caller is, where they act, and what they may do there."""

    user_id: str
    name: str
    email: str
    mode: str
    context: ContextResponse
    roles: list[RoleResponse]
    highest_role_level: int
    permissions: list[str]
