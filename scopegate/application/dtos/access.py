"""Organization access record (what the caller may do inside one organization)."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class OrganizationAccess:
    """Access of one user to one organization, from the console or computed locally."""

    organization_id: str
    organization_slug: str
    organization_name: str
    organization_role: str | None
    service_role: str | None
    service_role_level: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrganizationAccess":
        """Build from a cached dict or a console payload (unknown keys ignored)."""
        return cls(
            organization_id=str(data["organization_id"]),
            organization_slug=data.get("organization_slug") or str(data["organization_id"]),
            organization_name=data.get("organization_name")
            or data.get("organization_slug")
            or str(data["organization_id"]),
            organization_role=data.get("organization_role"),
            service_role=data.get("service_role"),
            service_role_level=int(data.get("service_role_level") or 0),
        )
