"""User-role assignment and permission breakdown schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scopegate.application.dtos.assignment import AssignmentDetail
from scopegate.domain.enums import ScopeType
from scopegate.schemas.role import RoleResponse


class ScopeFields(BaseModel):
    """(organization_id, branch_id): both null is global, organization only is org-wide."""

    organization_id: str | None = Field(default=None, max_length=36)
    branch_id: str | None = Field(default=None, max_length=36)


class AssignRoleRequest(ScopeFields):
    """Assign one role, named by id or by slug."""

    role_id: str | None = None
    role_slug: str | None = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def _one_role_reference(self) -> "AssignRoleRequest":
        if not self.role_id and not self.role_slug:
            raise ValueError("role_id or role_slug is required")
        return self


class SyncRolesRequest(ScopeFields):
    """Replace the user's roles at exactly this scope. roles are ids or slugs."""

    roles: list[str] = Field(default_factory=list, max_length=100)


class AssignmentResponse(BaseModel):
    id: int
    role: RoleResponse
    scope: ScopeType
    scope_label: str
    organization_id: str | None
    organization_name: str | None
    branch_id: str | None
    branch_name: str | None
    created_at: datetime | None

    @classmethod
    def from_detail(cls, detail: AssignmentDetail) -> "AssignmentResponse":
        a = detail.assignment
        return cls(
            id=a.id,
            role=RoleResponse.model_validate(a.role),
            scope=a.scope,
            scope_label=a.scope.label,
            organization_id=a.organization_id,
            organization_name=detail.organization_name,
            branch_id=a.branch_id,
            branch_name=detail.branch_name,
            created_at=a.created_at,
        )


class AssignResultResponse(BaseModel):
    created: bool


class RoleGrantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: RoleResponse
    scope: ScopeType
    organization_id: str | None
    organization_name: str | None
    branch_id: str | None
    branch_name: str | None
    permissions: list[str]


class TeamGrantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: str
    team_name: str
    permissions: list[str]


class PermissionsBreakdownResponse(BaseModel):
    """Effective permissions of a user in one context, with the grant each came from."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    user_name: str | None
    user_email: str | None
    organization_id: str | None
    branch_id: str | None
    role_assignments: list[RoleGrantResponse]
    team_memberships: list[TeamGrantResponse]
    aggregated_permissions: list[str]
