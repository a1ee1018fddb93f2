"""Cache key builders. Single place for key format (DRY).

Key components (user ids, organization ids, role ids) must not contain
CACHE_KEY_SEP to avoid ambiguous or colliding keys.
"""

from scopegate.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_JWKS,
    CACHE_PREFIX_ORG_ACCESS,
    CACHE_PREFIX_ROLE_PERMISSIONS,
    CACHE_PREFIX_TEAM_PERMISSIONS,
    CACHE_PREFIX_USER_TEAMS,
)


def _validate_key_components(*components: tuple[str, str]) -> None:
    """Raise ValueError if any component contains the key separator.

    Args:
        components: (value, name) pairs.
    """
    for value, name in components:
        if CACHE_KEY_SEP in value:
            raise ValueError(
                f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
            )


def role_permissions_key(role_id: str) -> str:
    """Permission slugs granted by one role."""
    _validate_key_components((role_id, "role_id"))
    return f"{CACHE_PREFIX_ROLE_PERMISSIONS}{CACHE_KEY_SEP}{role_id}"


def team_permissions_key(team_id: str) -> str:
    """Permission slugs granted by one team."""
    _validate_key_components((team_id, "team_id"))
    return f"{CACHE_PREFIX_TEAM_PERMISSIONS}{CACHE_KEY_SEP}{team_id}"


def user_teams_key(user_id: str, organization_id: str) -> str:
    """Team ids of a user inside one organization."""
    _validate_key_components((user_id, "user_id"), (organization_id, "organization_id"))
    return f"{CACHE_PREFIX_USER_TEAMS}{CACHE_KEY_SEP}{user_id}{CACHE_KEY_SEP}{organization_id}"


def org_access_key(user_id: str, organization_id: str) -> str:
    """Organization access record of a user."""
    _validate_key_components((user_id, "user_id"), (organization_id, "organization_id"))
    return f"{CACHE_PREFIX_ORG_ACCESS}{CACHE_KEY_SEP}{user_id}{CACHE_KEY_SEP}{organization_id}"


def org_access_pattern(organization_id: str) -> str:
    """Every user's access record for one organization."""
    _validate_key_components((organization_id, "organization_id"))
    return f"{CACHE_PREFIX_ORG_ACCESS}{CACHE_KEY_SEP}*{CACHE_KEY_SEP}{organization_id}"


def user_teams_pattern(organization_id: str) -> str:
    """Every user's team ids for one organization."""
    _validate_key_components((organization_id, "organization_id"))
    return f"{CACHE_PREFIX_USER_TEAMS}{CACHE_KEY_SEP}*{CACHE_KEY_SEP}{organization_id}"


def jwks_key() -> str:
    """Console signing keys (one global entry)."""
    return CACHE_PREFIX_JWKS


def user_org_access_pattern(user_id: str) -> str:
    """Access records of one user across every organization."""
    _validate_key_components((user_id, "user_id"))
    return f"{CACHE_PREFIX_ORG_ACCESS}{CACHE_KEY_SEP}{user_id}{CACHE_KEY_SEP}*"
