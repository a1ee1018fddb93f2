"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleResult:
    """Role read-model. organization_id is the owning organization (None for global roles)."""

    id: str
    name: str
    slug: str
    level: int
    description: str | None
    organization_id: str | None

    @property
    def is_global(self) -> bool:
        return self.organization_id is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "level": self.level,
            "description": self.description,
            "organization_id": self.organization_id,
        }


@dataclass(frozen=True)
class PermissionSyncResult:
    """Outcome of replacing a role's permission set."""

    attached: int
    detached: int
