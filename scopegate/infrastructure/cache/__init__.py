"""Cache: Redis service, read-through helper and cache key builders."""

from scopegate.infrastructure.cache.cache_protocol import CacheProtocol
from scopegate.infrastructure.cache.keys import (
    jwks_key,
    org_access_key,
    org_access_pattern,
    role_permissions_key,
    team_permissions_key,
    user_teams_key,
    user_org_access_pattern,
    user_teams_pattern,
)
from scopegate.infrastructure.cache.redis_cache import CacheService, remember

__all__ = [
    "CacheProtocol",
    "CacheService",
    "jwks_key",
    "org_access_key",
    "org_access_pattern",
    "remember",
    "role_permissions_key",
    "team_permissions_key",
    "user_teams_key",
    "user_org_access_pattern",
    "user_teams_pattern",
]
