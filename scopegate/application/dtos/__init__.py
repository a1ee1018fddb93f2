"""Application DTOs (read models returned by repositories and services)."""

from scopegate.application.dtos.access import OrganizationAccess
from scopegate.application.dtos.assignment import (
    AssignmentDetail,
    PermissionsBreakdown,
    RoleAssignmentResult,
    RoleGrant,
    TeamGrant,
)
from scopegate.application.dtos.permission import PermissionMatrix, PermissionResult
from scopegate.application.dtos.role import PermissionSyncResult, RoleResult
from scopegate.application.dtos.team import LocationResult, TeamResult
from scopegate.application.dtos.user import UserResult

__all__ = [
    "AssignmentDetail",
    "LocationResult",
    "OrganizationAccess",
    "PermissionMatrix",
    "PermissionResult",
    "PermissionSyncResult",
    "PermissionsBreakdown",
    "RoleAssignmentResult",
    "RoleGrant",
    "RoleResult",
    "TeamGrant",
    "TeamResult",
    "UserResult",
]
