"""Team and location API schemas. Organization and branch come from the request context."""

from pydantic import BaseModel, ConfigDict, Field


class TeamCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str | None
    name: str
    is_standalone: bool | None


class LocationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    address: str | None = Field(default=None, max_length=1000)


class LocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str | None
    branch_id: str | None
    name: str
    code: str
    address: str | None
    is_active: bool
