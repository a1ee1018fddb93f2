"""Application services (use cases)."""

from scopegate.application.services.authorization_service import AuthorizationService
from scopegate.application.services.cache_purge_service import CachePurgeService
from scopegate.application.services.context_service import ContextService
from scopegate.application.services.organization_access_service import (
    OrganizationAccessService,
)
from scopegate.application.services.permission_service import PermissionService
from scopegate.application.services.role_service import RoleService
from scopegate.application.services.user_role_service import UserRoleService

__all__ = [
    "AuthorizationService",
    "CachePurgeService",
    "ContextService",
    "OrganizationAccessService",
    "PermissionService",
    "RoleService",
    "UserRoleService",
]
