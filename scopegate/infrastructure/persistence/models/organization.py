"""Organization ORM model. Tenant root; its id is the scope key stored on assignments."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    ModeTaggedMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


class Organization(CuidMixin, TimestampMixin, SoftDeleteMixin, ModeTaggedMixin, Base):
    """Organization. Table: organization. Unique slug.

    In console mode the id is the identity provider's organization id.
    """

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
