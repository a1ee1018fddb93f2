"""DTOs for teams and locations (organization-scoped resources)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TeamResult:
    id: str
    organization_id: str | None
    name: str
    is_standalone: bool | None


@dataclass(frozen=True)
class LocationResult:
    id: str
    organization_id: str | None
    branch_id: str | None
    name: str
    code: str
    address: str | None
    is_active: bool
