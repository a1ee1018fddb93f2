"""Infrastructure services: database-backed adapters for application ports."""

from scopegate.infrastructure.services.permission_resolver import PermissionResolver
from scopegate.infrastructure.services.rbac_initialization_service import (
    DEFAULT_ROLES,
    SYSTEM_PERMISSIONS,
    RbacInitializationService,
)

__all__ = [
    "DEFAULT_ROLES",
    "SYSTEM_PERMISSIONS",
    "PermissionResolver",
    "RbacInitializationService",
]
