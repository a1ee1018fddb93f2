"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, SoftDeleteMixin, ModeTaggedMixin and
the scope-field mixins (OrganizationScopedMixin, BranchScopedMixin,
TeamScopedMixin). Scope-field mixins append to ``__scope_fields__``, which
the flush hooks in scoping.py use to auto-fill and protect those columns.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.shared.utils.generators import generate_cuid


class CuidMixin:
    """Primary key id as CUID string."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(
            String(SCOPE_ID_MAX_LENGTH), primary_key=True, default=generate_cuid
        )


class TimestampMixin:
    """created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class SoftDeleteMixin:
    """Soft delete (deleted_at). Null means not deleted."""

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)


class ModeTaggedMixin:
    """Records which operating mode created the row.

    is_standalone is stamped on insert when left unset and never changes
    afterwards (see scoping.py). Read filters live in scoping.py as well.
    """

    __mode_tagged__: ClassVar[bool] = True

    @declared_attr
    def is_standalone(cls) -> Mapped[bool | None]:
        return mapped_column(Boolean, nullable=True, index=True)


class _ScopeFieldsMixin:
    __scope_fields__: ClassVar[tuple[str, ...]] = ()


class OrganizationScopedMixin(_ScopeFieldsMixin):
    """organization_id filled from the request context on insert; immutable once set."""

    __scope_fields__: ClassVar[tuple[str, ...]] = ("organization_id",)

    @declared_attr
    def organization_id(cls) -> Mapped[str | None]:
        return mapped_column(String(SCOPE_ID_MAX_LENGTH), nullable=True, index=True)


class BranchScopedMixin(_ScopeFieldsMixin):
    """branch_id filled from the request context on insert; immutable once set."""

    __scope_fields__: ClassVar[tuple[str, ...]] = ("branch_id",)

    @declared_attr
    def branch_id(cls) -> Mapped[str | None]:
        return mapped_column(String(SCOPE_ID_MAX_LENGTH), nullable=True, index=True)


class TeamScopedMixin(_ScopeFieldsMixin):
    """team_id filled from the request context on insert; immutable once set."""

    __scope_fields__: ClassVar[tuple[str, ...]] = ("team_id",)

    @declared_attr
    def team_id(cls) -> Mapped[str | None]:
        return mapped_column(String(SCOPE_ID_MAX_LENGTH), nullable=True, index=True)


def scope_fields_of(model: type) -> tuple[str, ...]:
    """Union of __scope_fields__ over the model's MRO, in declaration order."""
    fields: list[str] = []
    for klass in model.__mro__:
        for name in klass.__dict__.get("__scope_fields__", ()):
            if name not in fields:
                fields.append(name)
    return tuple(fields)


def is_mode_tagged(model: type) -> bool:
    return bool(getattr(model, "__mode_tagged__", False))
