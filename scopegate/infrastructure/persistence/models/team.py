"""Team and TeamMember ORM models. Teams grant permissions inside one organization."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    ModeTaggedMixin,
    OrganizationScopedMixin,
    TimestampMixin,
)


class Team(CuidMixin, TimestampMixin, ModeTaggedMixin, OrganizationScopedMixin, Base):
    """Team. Table: team. organization_id is filled from the request context."""

    __tablename__ = "team"

    name: Mapped[str] = mapped_column(String, nullable=False)
    console_team_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True, unique=True
    )


class TeamMember(CuidMixin, TimestampMixin, Base):
    """Team membership. Table: team_member. Unique (team_id, user_id)."""

    __tablename__ = "team_member"

    team_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)
