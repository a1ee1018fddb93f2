"""DTOs for role assignments and the permission breakdown read."""

from dataclasses import dataclass, field
from datetime import datetime

from scopegate.application.dtos.role import RoleResult
from scopegate.domain.enums import ScopeType


@dataclass(frozen=True)
class RoleAssignmentResult:
    """One stored (user, role, scope) row."""

    id: int
    user_id: str
    role: RoleResult
    organization_id: str | None
    branch_id: str | None
    created_at: datetime | None = None

    @property
    def scope(self) -> ScopeType:
        return ScopeType.classify(self.organization_id, self.branch_id)


@dataclass(frozen=True)
class AssignmentDetail:
    """Assignment with resolved organization/branch names (admin index)."""

    assignment: RoleAssignmentResult
    organization_name: str | None = None
    branch_name: str | None = None


@dataclass(frozen=True)
class RoleGrant:
    """A role's contribution to a breakdown: which scope it came from and what it grants."""

    role: RoleResult
    scope: ScopeType
    organization_id: str | None
    organization_name: str | None
    branch_id: str | None
    branch_name: str | None
    permissions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TeamGrant:
    """A team membership's contribution to a breakdown."""

    team_id: str
    team_name: str
    permissions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PermissionsBreakdown:
    """Effective permissions of a user in a context, with provenance.

    role_assignments are ordered broadest scope first. Provenance is kept
    as-is (a slug granted by two roles appears under both);
    aggregated_permissions is the deduplicated, sorted union.
    """

    user_id: str
    user_name: str | None
    user_email: str | None
    organization_id: str | None
    branch_id: str | None
    role_assignments: list[RoleGrant] = field(default_factory=list)
    team_memberships: list[TeamGrant] = field(default_factory=list)
    aggregated_permissions: list[str] = field(default_factory=list)
