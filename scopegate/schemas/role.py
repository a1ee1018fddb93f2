"""Role API schemas."""

from pydantic import BaseModel, ConfigDict, Field

SLUG_PATTERN = r"^[a-z0-9][a-z0-9._-]*$"


class RoleCreateRequest(BaseModel):
    """Request body for creating a role. organization_id null creates a global role."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    level: int = Field(default=10, ge=1, le=1000)
    description: str | None = Field(default=None, max_length=500)
    organization_id: str | None = Field(default=None, max_length=36)
    permissions: list[str] = Field(default_factory=list, max_length=500)


class RoleUpdate(BaseModel):
    """Request body for updating a role (partial). The slug cannot change."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    level: int | None = Field(default=None, ge=1, le=1000)
    description: str | None = Field(default=None, max_length=500)


class RolePermissionsSync(BaseModel):
    """Replace a role's permissions. Entries are permission ids or slugs."""

    permissions: list[str] = Field(default_factory=list, max_length=500)


class RoleResponse(BaseModel):
    """Role list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    level: int
    description: str | None
    organization_id: str | None
    is_global: bool


class PermissionSyncResponse(BaseModel):
    """Counts of links added and removed by a sync."""

    model_config = ConfigDict(from_attributes=True)

    attached: int
    detached: int
