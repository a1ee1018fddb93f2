"""Scope value object: an (organization, branch) pair with its classification."""

from dataclasses import dataclass

from scopegate.domain.enums import ScopeType
from scopegate.domain.exceptions import InvalidScopeException


@dataclass(frozen=True)
class ScopeRef:
    """Where an assignment applies, or the context a check is evaluated in.

    Enforces that a branch is never given without its organization.
    Empty strings are normalized to None.
    """

    organization_id: str | None = None
    branch_id: str | None = None

    def __post_init__(self) -> None:
        if self.organization_id == "":
            object.__setattr__(self, "organization_id", None)
        if self.branch_id == "":
            object.__setattr__(self, "branch_id", None)
        if self.branch_id is not None and self.organization_id is None:
            raise InvalidScopeException(
                organization_id=self.organization_id, branch_id=self.branch_id
            )

    @property
    def scope_type(self) -> ScopeType:
        return ScopeType.classify(self.organization_id, self.branch_id)

    @property
    def is_global(self) -> bool:
        return self.organization_id is None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "organization_id": self.organization_id,
            "branch_id": self.branch_id,
            "scope": self.scope_type.value,
        }
