"""Domain enumerations for scopegate.

Enums represent fixed sets of domain values: the scope an assignment
applies to and the operating mode records belong to.
"""

from enum import Enum


class ScopeType(str, Enum):
    """Scope of a role assignment, derived from its (organization, branch) pair.

    GLOBAL applies everywhere, ORG_WIDE to every branch of one organization,
    BRANCH to a single branch.
    """

    GLOBAL = "global"
    ORG_WIDE = "org-wide"
    BRANCH = "branch"

    @classmethod
    def classify(
        cls, organization_id: str | None, branch_id: str | None
    ) -> "ScopeType":
        """Classify a stored pair. Total: every pair maps to exactly one scope.

        Without an organization the pair is GLOBAL whatever the branch; only
        an organization plus a branch yields BRANCH.
        """
        if organization_id is None:
            return cls.GLOBAL
        if branch_id is None:
            return cls.ORG_WIDE
        return cls.BRANCH

    @property
    def priority(self) -> int:
        """Sort key: broadest scope first (global 0, org-wide 1, branch 2)."""
        return _SCOPE_PRIORITY[self]

    @property
    def label(self) -> str:
        return _SCOPE_LABELS[self]

    @classmethod
    def values(cls) -> list[str]:
        """Return all scope values as strings."""
        return [scope.value for scope in cls]


_SCOPE_PRIORITY = {
    ScopeType.GLOBAL: 0,
    ScopeType.ORG_WIDE: 1,
    ScopeType.BRANCH: 2,
}

_SCOPE_LABELS = {
    ScopeType.GLOBAL: "Global",
    ScopeType.ORG_WIDE: "Organization-wide",
    ScopeType.BRANCH: "Branch",
}


class AuthMode(str, Enum):
    """Operating mode. Records created in one mode are invisible to the other's filters."""

    STANDALONE = "standalone"
    CONSOLE = "console"

    @classmethod
    def current(cls) -> "AuthMode":
        """Return the process-wide mode from settings."""
        from scopegate.core.config import get_settings

        return cls(get_settings().auth_mode)

    @property
    def is_standalone(self) -> bool:
        return self is AuthMode.STANDALONE


class RoleScopeFilter(str, Enum):
    """Filter for role listings: every visible role, only global, or only organization-owned."""

    ALL = "all"
    GLOBAL = "global"
    ORGANIZATION = "org"
