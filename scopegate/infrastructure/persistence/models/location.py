"""Location ORM model. A physical site of a branch; organization and branch come from context."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import (
    BranchScopedMixin,
    CuidMixin,
    ModeTaggedMixin,
    OrganizationScopedMixin,
    TimestampMixin,
)


class Location(
    CuidMixin,
    TimestampMixin,
    ModeTaggedMixin,
    OrganizationScopedMixin,
    BranchScopedMixin,
    Base,
):
    """Location. Table: location."""

    __tablename__ = "location"

    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
