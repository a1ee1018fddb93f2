"""Branch ORM model. A location/unit inside exactly one organization."""

from typing import ClassVar

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    ModeTaggedMixin,
    TimestampMixin,
)


class Branch(CuidMixin, TimestampMixin, ModeTaggedMixin, Base):
    """Branch. Table: branch. Unique (organization_id, slug).

    At most one active headquarters branch per organization is expected;
    it is the fallback branch when a request names none.
    """

    __tablename__ = "branch"
    __scope_fields__: ClassVar[tuple[str, ...]] = ("organization_id",)

    organization_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    is_headquarters: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_branch_organization_slug"),
    )
