"""DTOs for the authenticated principal."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model (the authenticated caller or a breakdown subject)."""

    id: str
    name: str
    email: str
    organization_id: str | None
    is_active: bool
    is_standalone: bool | None = None
