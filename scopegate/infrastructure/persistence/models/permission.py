"""Permission, RolePermission, and TeamPermission ORM models."""

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Permission(CuidMixin, TimestampMixin, Base):
    """Permission. Table: permission. Global slug catalogue (e.g. orders.view)."""

    __tablename__ = "permission"

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    group: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class RolePermission(CuidMixin, TimestampMixin, Base):
    """Role-permission link. Table: role_permission. Unique (role_id, permission_id)."""

    __tablename__ = "role_permission"

    role_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("role.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("permission.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )


class TeamPermission(CuidMixin, TimestampMixin, Base):
    """Team-permission link. Table: team_permission. Unique (team_id, permission_id)."""

    __tablename__ = "team_permission"

    team_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("permission.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("team_id", "permission_id", name="uq_team_permission"),
    )
