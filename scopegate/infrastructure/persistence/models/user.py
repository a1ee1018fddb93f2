"""User ORM model. Local users (standalone) or mirrors of identity-provider users (console)."""

from sqlalchemy import Boolean, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    ModeTaggedMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


class User(CuidMixin, TimestampMixin, SoftDeleteMixin, ModeTaggedMixin, Base):
    """User. Table: app_user. Email unique among rows that are not soft-deleted."""

    __tablename__ = "app_user"

    console_user_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True, unique=True
    )
    # Default organization (the one shown first after login); not an access grant.
    organization_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index(
            "uq_app_user_email_active",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
