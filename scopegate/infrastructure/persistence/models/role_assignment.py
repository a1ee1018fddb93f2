"""RoleAssignment ORM model: the user-role-scope triple (table role_user)."""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.domain.enums import ScopeType
from scopegate.infrastructure.persistence.database import Base
from scopegate.infrastructure.persistence.models.mixins import TimestampMixin
from scopegate.infrastructure.persistence.models.role import Role


class RoleAssignment(TimestampMixin, Base):
    """One role granted to one user at one scope.

    (null, null) is global, (org, null) org-wide, (org, branch) branch.
    A branch without an organization is rejected by a check constraint.
    Uniqueness treats null scope columns as equal (coalesce index).
    """

    __tablename__ = "role_user"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[str] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH),
        ForeignKey("role.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True
    )
    branch_id: Mapped[str | None] = mapped_column(
        String(SCOPE_ID_MAX_LENGTH), nullable=True
    )

    role: Mapped[Role] = relationship(Role, lazy="joined", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(
            "branch_id IS NULL OR organization_id IS NOT NULL",
            name="ck_role_user_branch_needs_organization",
        ),
        Index("ix_role_user_user_role", "user_id", "role_id"),
    )

    @property
    def scope(self) -> ScopeType:
        return ScopeType.classify(self.organization_id, self.branch_id)


Index(
    "uq_role_user_scope",
    RoleAssignment.user_id,
    RoleAssignment.role_id,
    func.coalesce(RoleAssignment.organization_id, ""),
    func.coalesce(RoleAssignment.branch_id, ""),
    unique=True,
)
