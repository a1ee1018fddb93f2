"""Role ORM model. Global roles (organization_id null) or roles owned by one organization."""

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Role(CuidMixin, TimestampMixin, Base):
    """Role. Table: role. Slug unique per owner (global roles form their own partition).

    level orders roles for gate comparisons; higher outranks lower and is always >= 1.
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Owning organization; null for global roles.
    organization_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True, index=True
    )

    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_role_level_positive"),
    )

    @property
    def is_global(self) -> bool:
        return self.organization_id is None


Index(
    "uq_role_owner_slug",
    func.coalesce(Role.organization_id, ""),
    Role.slug,
    unique=True,
)
