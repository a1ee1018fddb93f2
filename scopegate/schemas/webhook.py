"""Webhook payload schemas."""

from pydantic import BaseModel, Field


class CachePurgeRequest(BaseModel):
    """Sent by the console when a user's access to an organization changed."""

    organization_id: str = Field(..., min_length=1, max_length=36)
    user_id: str | None = Field(default=None, max_length=36)


class CachePurgeResponse(BaseModel):
    status: str = "cleared"
    organization_id: str
    user_id: str | None
