"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from scopegate.api.v1.dependencies.
"""

from fastapi import APIRouter

from scopegate.api.v1.endpoints import (
    health,
    locations,
    me,
    permissions,
    roles,
    teams,
    user_roles,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(me.router, prefix="/me", tags=["me"])
api_router.include_router(user_roles.router, prefix="/users", tags=["user-roles"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
