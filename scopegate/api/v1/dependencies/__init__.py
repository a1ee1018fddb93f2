"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, never on infrastructure
directly. Modules: db (repositories and services), auth (current user),
context (verified request context) and rbac (route gates).
"""

from .auth import get_bearer_token, get_current_user
from .context import (
    get_context_db,
    get_context_service,
    get_location_repo,
    get_location_repo_for_write,
    get_organization_access_service,
    get_raw_context,
    get_request_context,
    get_team_repo,
    get_team_repo_for_write,
)
from .db import (
    get_authorization_service,
    get_authorization_service_for_write,
    get_cache_purge_service,
    get_permission_service,
    get_permission_service_for_write,
    get_role_service,
    get_role_service_for_write,
    get_user_role_service,
    get_user_role_service_for_write,
)
from .rbac import (
    require_any_permission,
    require_branch,
    require_organization,
    require_permission,
    require_role,
)

__all__ = [
    "get_authorization_service",
    "get_authorization_service_for_write",
    "get_bearer_token",
    "get_cache_purge_service",
    "get_context_db",
    "get_context_service",
    "get_current_user",
    "get_location_repo",
    "get_location_repo_for_write",
    "get_organization_access_service",
    "get_permission_service",
    "get_permission_service_for_write",
    "get_raw_context",
    "get_request_context",
    "get_role_service",
    "get_role_service_for_write",
    "get_team_repo",
    "get_team_repo_for_write",
    "get_user_role_service",
    "get_user_role_service_for_write",
    "require_any_permission",
    "require_branch",
    "require_organization",
    "require_permission",
    "require_role",
]
