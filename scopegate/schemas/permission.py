"""Permission API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from scopegate.schemas.role import SLUG_PATTERN, RoleResponse


class PermissionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    group: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class PermissionUpdate(BaseModel):
    """Partial update. The slug cannot change."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    group: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    group: str | None
    description: str | None


class PermissionMatrixResponse(BaseModel):
    """Roles against the permission slugs they grant; matrix is keyed by role id."""

    model_config = ConfigDict(from_attributes=True)

    roles: list[RoleResponse]
    permissions: list[PermissionResponse]
    groups: list[str]
    matrix: dict[str, list[str]]
