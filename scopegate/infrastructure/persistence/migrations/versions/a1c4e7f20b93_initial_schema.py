"""initial schema: tenants, users, roles, permissions, scoped assignments

Revision ID: a1c4e7f20b93
Revises:
Create Date: 2026-10-12 09:14:03.512207

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b93"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(36)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "organization",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_standalone", sa.Boolean(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_organization_is_standalone", "organization", ["is_standalone"])
    op.create_index("ix_organization_deleted_at", "organization", ["deleted_at"])

    op.create_table(
        "branch",
        sa.Column("id", ID, nullable=False),
        sa.Column("organization_id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("is_headquarters", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_standalone", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "slug", name="uq_branch_organization_slug"),
    )
    op.create_index("ix_branch_organization_id", "branch", ["organization_id"])
    op.create_index("ix_branch_is_standalone", "branch", ["is_standalone"])

    op.create_table(
        "app_user",
        sa.Column("id", ID, nullable=False),
        sa.Column("console_user_id", ID, nullable=True),
        sa.Column("organization_id", ID, nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_standalone", sa.Boolean(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("console_user_id"),
    )
    op.create_index("ix_app_user_organization_id", "app_user", ["organization_id"])
    op.create_index("ix_app_user_is_standalone", "app_user", ["is_standalone"])
    op.create_index("ix_app_user_deleted_at", "app_user", ["deleted_at"])
    op.create_index(
        "uq_app_user_email_active",
        "app_user",
        ["email"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "role",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("organization_id", ID, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("level >= 1", name="ck_role_level_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_role_organization_id", "role", ["organization_id"])
    op.create_index(
        "uq_role_owner_slug",
        "role",
        [sa.text("coalesce(organization_id, '')"), "slug"],
        unique=True,
    )

    op.create_table(
        "permission",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("group", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_permission_group", "permission", ["group"])

    op.create_table(
        "role_permission",
        sa.Column("id", ID, nullable=False),
        sa.Column("role_id", ID, nullable=False),
        sa.Column("permission_id", ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permission.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )
    op.create_index("ix_role_permission_role_id", "role_permission", ["role_id"])
    op.create_index("ix_role_permission_permission_id", "role_permission", ["permission_id"])

    op.create_table(
        "role_user",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("user_id", ID, nullable=False),
        sa.Column("role_id", ID, nullable=False),
        sa.Column("organization_id", ID, nullable=True),
        sa.Column("branch_id", ID, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "branch_id IS NULL OR organization_id IS NOT NULL",
            name="ck_role_user_branch_needs_organization",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_role_user_user_id", "role_user", ["user_id"])
    op.create_index("ix_role_user_role_id", "role_user", ["role_id"])
    op.create_index("ix_role_user_user_role", "role_user", ["user_id", "role_id"])
    op.create_index(
        "uq_role_user_scope",
        "role_user",
        [
            "user_id",
            "role_id",
            sa.text("coalesce(organization_id, '')"),
            sa.text("coalesce(branch_id, '')"),
        ],
        unique=True,
    )

    op.create_table(
        "team",
        sa.Column("id", ID, nullable=False),
        sa.Column("organization_id", ID, nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("console_team_id", ID, nullable=True),
        sa.Column("is_standalone", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("console_team_id"),
    )
    op.create_index("ix_team_organization_id", "team", ["organization_id"])
    op.create_index("ix_team_is_standalone", "team", ["is_standalone"])

    op.create_table(
        "team_member",
        sa.Column("id", ID, nullable=False),
        sa.Column("team_id", ID, nullable=False),
        sa.Column("user_id", ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )
    op.create_index("ix_team_member_team_id", "team_member", ["team_id"])
    op.create_index("ix_team_member_user_id", "team_member", ["user_id"])

    op.create_table(
        "team_permission",
        sa.Column("id", ID, nullable=False),
        sa.Column("team_id", ID, nullable=False),
        sa.Column("permission_id", ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permission.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("team_id", "permission_id", name="uq_team_permission"),
    )
    op.create_index("ix_team_permission_team_id", "team_permission", ["team_id"])
    op.create_index("ix_team_permission_permission_id", "team_permission", ["permission_id"])

    op.create_table(
        "location",
        sa.Column("id", ID, nullable=False),
        sa.Column("organization_id", ID, nullable=True),
        sa.Column("branch_id", ID, nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_standalone", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_location_organization_id", "location", ["organization_id"])
    op.create_index("ix_location_branch_id", "location", ["branch_id"])
    op.create_index("ix_location_is_standalone", "location", ["is_standalone"])

    # Built-in global roles; levels match the default ROLE_LEVELS setting.
    role_table = sa.table(
        "role",
        sa.column("id", ID),
        sa.column("name", sa.String()),
        sa.column("slug", sa.String()),
        sa.column("level", sa.Integer()),
        sa.column("description", sa.Text()),
    )
    op.bulk_insert(
        role_table,
        [
            {"id": "role_admin", "name": "Admin", "slug": "admin", "level": 100,
             "description": "Full access"},
            {"id": "role_manager", "name": "Manager", "slug": "manager", "level": 50,
             "description": "Manages a branch or organization"},
            {"id": "role_member", "name": "Member", "slug": "member", "level": 10,
             "description": "Regular member"},
        ],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("location")
    op.drop_table("team_permission")
    op.drop_table("team_member")
    op.drop_table("team")
    op.drop_table("role_user")
    op.drop_table("role_permission")
    op.drop_table("permission")
    op.drop_table("role")
    op.drop_table("app_user")
    op.drop_table("branch")
    op.drop_table("organization")
