"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY). Used by
infrastructure cache key builders and the authorization services.
"""

# Cache key prefixes
CACHE_PREFIX_ROLE_PERMISSIONS = "role_permissions"
CACHE_PREFIX_TEAM_PERMISSIONS = "team_permissions"
CACHE_PREFIX_USER_TEAMS = "user_teams"
CACHE_PREFIX_ORG_ACCESS = "org_access"
CACHE_PREFIX_JWKS = "jwks"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Length of organization/branch identifiers stored on scoped rows.
SCOPE_ID_MAX_LENGTH = 36

# Session.info keys used by the scoping hooks.
SESSION_CONTEXT_KEY = "request_context"
SESSION_MODE_KEY = "auth_mode"

# Service role returned when access is computed locally and the user holds no role.
DEFAULT_SERVICE_ROLE = "member"
