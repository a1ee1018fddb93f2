"""Request context: the organization/branch/team a request acts in.

Built once per request by ContextMiddleware (validated headers) and
completed by the get_request_context dependency (organization access
record). Passed explicitly to services and bound to the DB session for
the scoping hooks; never stored in globals.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from scopegate.domain.exceptions import MissingContextException
from scopegate.domain.value_objects import ScopeRef

DEFAULT_ORGANIZATION_WIDE_ACCESS_LEVEL = 80


@dataclass(frozen=True)
class RequestContext:
    """Immutable per-request context.

    service_role_level defaults to 0 (no role). Organization-wide access
    means the service role level reaches organization_wide_access_level.
    """

    organization_id: str | None = None
    branch_id: str | None = None
    team_id: str | None = None
    organization_role: str | None = None
    service_role: str | None = None
    service_role_level: int = 0
    organization_wide_access_level: int = DEFAULT_ORGANIZATION_WIDE_ACCESS_LEVEL
    branch_name: str | None = None

    def has_organization(self) -> bool:
        return self.organization_id is not None

    def has_branch(self) -> bool:
        return self.branch_id is not None

    def has_team(self) -> bool:
        return self.team_id is not None

    def has_organization_wide_access(self) -> bool:
        return self.service_role_level >= self.organization_wide_access_level

    def can_access_branch(self, branch_id: str) -> bool:
        """Any branch with organization-wide access, otherwise only the current one."""
        if self.has_organization_wide_access():
            return True
        return self.branch_id == branch_id

    def can_access_team(self, team_id: str) -> bool:
        """Any team with organization-wide access, otherwise only the current one."""
        if self.has_organization_wide_access():
            return True
        return self.team_id == team_id

    def require_organization_id(self) -> str:
        """Return organization_id or raise MissingContextException."""
        if self.organization_id is None:
            raise MissingContextException("organization")
        return self.organization_id

    def require_branch_id(self) -> str:
        """Return branch_id or raise MissingContextException."""
        if self.branch_id is None:
            raise MissingContextException("branch")
        return self.branch_id

    def require_team_id(self) -> str:
        """Return team_id or raise MissingContextException."""
        if self.team_id is None:
            raise MissingContextException("team")
        return self.team_id

    def scope(self) -> ScopeRef:
        """The (organization, branch) pair to resolve assignments in."""
        return ScopeRef(self.organization_id, self.branch_id)

    def with_access(
        self,
        organization_role: str | None,
        service_role: str | None,
        service_role_level: int,
    ) -> RequestContext:
        """Copy with the organization access record applied."""
        return replace(
            self,
            organization_role=organization_role,
            service_role=service_role,
            service_role_level=service_role_level,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "branch_id": self.branch_id,
            "branch_name": self.branch_name,
            "team_id": self.team_id,
            "organization_role": self.organization_role,
            "service_role": self.service_role,
            "service_role_level": self.service_role_level,
            "has_organization_wide_access": self.has_organization_wide_access(),
        }
