"""Domain exceptions for scopegate.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class ScopeGateException(Exception):
    """Base exception for all scopegate errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ScopeGateException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidScopeException(ScopeGateException):
    """Raised for a malformed scope, e.g. a branch without an organization.

    Also raised when a branch does not belong to the given organization or a
    role owned by one organization is assigned inside another.
    """

    def __init__(
        self,
        message: str = "A branch scope requires an organization",
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            "INVALID_SCOPE",
            {"organization_id": organization_id, "branch_id": branch_id},
        )


class MissingContextException(ScopeGateException):
    """Raised when a query or gate needs an organization/branch/team that the request lacks."""

    def __init__(self, dimension: str) -> None:
        """Initialize with the missing context dimension.

        Args:
            dimension: 'organization', 'branch' or 'team'.
        """
        super().__init__(
            f"No {dimension} in the current request context",
            "MISSING_CONTEXT",
            {"dimension": dimension},
        )


class AuthenticationException(ScopeGateException):
    """Raised when authentication fails (missing, invalid or expired token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(ScopeGateException):
    """Raised by route gates when the caller lacks a permission, role or scope."""

    def __init__(
        self,
        permission: str | None = None,
        message: str = "Permission denied",
        details: dict[str, Any] | None = None,
    ) -> None:
        if permission:
            message = f"Permission denied: {permission}"
        merged: dict[str, Any] = dict(details or {})
        if permission:
            merged["permission"] = permission
        super().__init__(message, "PERMISSION_DENIED", merged)


class ResourceNotFoundException(ScopeGateException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class RoleNotFoundException(ScopeGateException):
    """Raised when an assignment names a role (by id or slug) that does not exist."""

    def __init__(self, role: str) -> None:
        super().__init__(
            f"Role not found: {role}",
            "ROLE_NOT_FOUND",
            {"role": role},
        )


class AssignmentNotFoundException(ScopeGateException):
    """Raised when removing a role assignment that does not exist at the given scope."""

    def __init__(
        self,
        user_id: str,
        role_id: str,
        organization_id: str | None,
        branch_id: str | None,
    ) -> None:
        super().__init__(
            "Role assignment not found",
            "ASSIGNMENT_NOT_FOUND",
            {
                "user_id": user_id,
                "role_id": role_id,
                "organization_id": organization_id,
                "branch_id": branch_id,
            },
        )


class DuplicateRoleException(ScopeGateException):
    """Raised when creating a role whose slug already exists in the same ownership partition."""

    def __init__(self, slug: str, organization_id: str | None = None) -> None:
        super().__init__(
            f"Role with slug '{slug}' already exists",
            "DUPLICATE_ROLE",
            {"slug": slug, "organization_id": organization_id},
        )


class DuplicatePermissionException(ScopeGateException):
    """Raised when creating a permission whose slug already exists."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"Permission with slug '{slug}' already exists",
            "DUPLICATE_PERMISSION",
            {"slug": slug},
        )


class SystemRoleProtectedException(ScopeGateException):
    """Raised when deleting one of the built-in global roles."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"System role '{slug}' cannot be deleted",
            "SYSTEM_ROLE_PROTECTED",
            {"slug": slug},
        )


class OrganizationAccessDeniedException(ScopeGateException):
    """Raised when the caller has no access to the organization in the request context."""

    def __init__(self, organization_id: str) -> None:
        super().__init__(
            "No access to this organization",
            "ORGANIZATION_ACCESS_DENIED",
            {"organization_id": organization_id},
        )


class SqlNotConfiguredException(ScopeGateException):
    """Raised when a DB session is requested but DATABASE_URL is not usable."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database is not configured. Set DATABASE_URL.",
            "SQL_NOT_CONFIGURED",
            {},
        )


class DuplicateEmailException(ScopeGateException):
    """Raised when a user's email is already taken by another active user."""

    def __init__(self, email: str | None = None) -> None:
        super().__init__(
            "Email already in use",
            "DUPLICATE_EMAIL",
            {"email": email} if email else {},
        )
