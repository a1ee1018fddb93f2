"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from scopegate.domain.enums import AuthMode, RoleScopeFilter, ScopeType
from scopegate.domain.exceptions import (
    AssignmentNotFoundException,
    AuthenticationException,
    AuthorizationException,
    DuplicateEmailException,
    DuplicatePermissionException,
    DuplicateRoleException,
    InvalidScopeException,
    MissingContextException,
    OrganizationAccessDeniedException,
    ResourceNotFoundException,
    RoleNotFoundException,
    ScopeGateException,
    SystemRoleProtectedException,
    ValidationException,
)
from scopegate.domain.value_objects import ScopeRef

__all__ = [
    # Enums
    "AuthMode",
    "RoleScopeFilter",
    "ScopeType",
    # Exceptions
    "AssignmentNotFoundException",
    "AuthenticationException",
    "AuthorizationException",
    "DuplicateEmailException",
    "DuplicatePermissionException",
    "DuplicateRoleException",
    "InvalidScopeException",
    "MissingContextException",
    "OrganizationAccessDeniedException",
    "ResourceNotFoundException",
    "RoleNotFoundException",
    "ScopeGateException",
    "SystemRoleProtectedException",
    "ValidationException",
    # Value objects
    "ScopeRef",
]
