"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata (used by
Alembic autogenerate and by tests that create the schema directly).
"""

from scopegate.infrastructure.persistence.models.branch import Branch
from scopegate.infrastructure.persistence.models.location import Location
from scopegate.infrastructure.persistence.models.organization import Organization
from scopegate.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
    TeamPermission,
)
from scopegate.infrastructure.persistence.models.role import Role
from scopegate.infrastructure.persistence.models.role_assignment import RoleAssignment
from scopegate.infrastructure.persistence.models.team import Team, TeamMember
from scopegate.infrastructure.persistence.models.user import User

__all__ = [
    "Branch",
    "Location",
    "Organization",
    "Permission",
    "Role",
    "RoleAssignment",
    "RolePermission",
    "Team",
    "TeamMember",
    "TeamPermission",
    "User",
]

# Registers the before_flush scope/mode hooks on Session.
from scopegate.infrastructure.persistence import scoping  # noqa: E402,F401
