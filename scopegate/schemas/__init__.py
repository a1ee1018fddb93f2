"""Pydantic request/response schemas for the API."""

from scopegate.schemas.assignment import (
    AssignmentResponse,
    AssignRoleRequest,
    PermissionsBreakdownResponse,
    SyncRolesRequest,
)
from scopegate.schemas.context import MeContextResponse
from scopegate.schemas.health import HealthResponse
from scopegate.schemas.permission import PermissionMatrixResponse, PermissionResponse
from scopegate.schemas.role import RoleResponse
from scopegate.schemas.team import LocationResponse, TeamResponse
from scopegate.schemas.webhook import CachePurgeRequest, CachePurgeResponse

__all__ = [
    "AssignRoleRequest",
    "AssignmentResponse",
    "CachePurgeRequest",
    "CachePurgeResponse",
    "HealthResponse",
    "LocationResponse",
    "MeContextResponse",
    "PermissionMatrixResponse",
    "PermissionResponse",
    "PermissionsBreakdownResponse",
    "RoleResponse",
    "SyncRolesRequest",
    "TeamResponse",
]
