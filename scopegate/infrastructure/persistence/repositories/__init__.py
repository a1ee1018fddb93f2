"""Persistence repositories. Re-exports for dependency injection."""

from scopegate.infrastructure.persistence.repositories.base import BaseRepository
from scopegate.infrastructure.persistence.repositories.organization_repo import (
    BranchRepository,
    OrganizationRepository,
)
from scopegate.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)
from scopegate.infrastructure.persistence.repositories.role_assignment_repo import (
    RoleAssignmentRepository,
)
from scopegate.infrastructure.persistence.repositories.role_permission_repo import (
    RolePermissionRepository,
)
from scopegate.infrastructure.persistence.repositories.role_repo import RoleRepository
from scopegate.infrastructure.persistence.repositories.team_repo import (
    LocationRepository,
    TeamRepository,
)
from scopegate.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "BranchRepository",
    "LocationRepository",
    "OrganizationRepository",
    "PermissionRepository",
    "RoleAssignmentRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "TeamRepository",
    "UserRepository",
]
