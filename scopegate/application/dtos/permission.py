"""DTOs for permission use cases."""

from dataclasses import dataclass, field

from scopegate.application.dtos.role import RoleResult


@dataclass(frozen=True)
class PermissionResult:
    """Permission read-model."""

    id: str
    name: str
    slug: str
    group: str | None
    description: str | None


@dataclass(frozen=True)
class PermissionMatrix:
    """Roles (level desc) against permission slugs they grant, plus the full catalogue.

    matrix is keyed by role id (an organization may own a role whose slug
    matches a global one).
    """

    roles: list[RoleResult] = field(default_factory=list)
    permissions: list[PermissionResult] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    matrix: dict[str, list[str]] = field(default_factory=dict)
