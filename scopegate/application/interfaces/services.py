"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from scopegate.application.dtos.assignment import RoleAssignmentResult


# Cache service interface
class ICacheService(Protocol):
    """Protocol for the key/value cache (Redis in production, fakes in tests)."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds."""

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""

    async def delete_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern; return the count."""


# Permission resolver interface
class IPermissionResolver(Protocol):
    """Protocol for per-role and per-team permission lookups."""

    async def get_role_permission_slugs(self, role_id: str) -> list[str]:
        """Return sorted permission slugs granted by one role."""

    async def get_team_permission_slugs(self, team_id: str) -> list[str]:
        """Return sorted permission slugs granted by one team."""

    async def get_user_team_ids(self, user_id: str, organization_id: str) -> list[str]:
        """Return ids of the organization's teams the user is a member of."""


# Assignment store interface (read side used by the aggregator)
class IAssignmentStore(Protocol):
    """Protocol for reading the role assignments effective in a context."""

    async def list_for_context(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[RoleAssignmentResult]:
        """Return assignments effective at (organization_id, branch_id)."""

    async def list_for_user(
        self, user_id: str, organization_id: str | None = None
    ) -> list[RoleAssignmentResult]:
        """Return every assignment of the user (global + organization_id's when given)."""

    async def highest_level(
        self,
        user_id: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> int:
        """Return the highest effective role level (0 when none)."""

    async def has_role(
        self,
        user_id: str,
        slug: str,
        organization_id: str | None = None,
        branch_id: str | None = None,
    ) -> bool:
        """Return True if a role with slug is effective in the context."""


# Console (identity provider) client interface
class IConsoleClient(Protocol):
    """Protocol for calls to the console identity provider."""

    async def get_organization_access(
        self, bearer_token: str, organization_id: str
    ) -> dict[str, Any] | None:
        """Return the caller's access record for organization_id, or None when denied."""

    async def get_jwks(self) -> dict[str, Any]:
        """Return the console's JSON Web Key Set."""
