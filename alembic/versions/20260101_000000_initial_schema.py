"""
Initial schema with uuid-ossp extension and chat tables.

Revision ID: 20260101_000000_initial_schema
Revises:
Create Date: 2026-01-01 00:00:00
"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20260101_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("uuid_generate_v4()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp";')

    # users
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("auth_provider", sa.String(length=50), nullable=False),
        sa.Column("auth_subject", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("name", sa.String(length=255)),
        sa.Column("nickname", sa.String(length=255)),
        sa.Column("photo_url", sa.Text()),
        sa.Column("status_message", sa.Text()),
        sa.Column("last_signed_in_at", sa.DateTime(timezone=True)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint(
            "auth_provider", "auth_subject", name="users_auth_provider_auth_subject_key"
        ),
    )
    op.create_index("idx_users_email", "users", ["email"])

    # notifications (push tokens)
    op.create_table(
        "notifications",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("device", sa.String(length=255)),
        sa.Column("os", sa.String(length=50)),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="notifications_user_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="notifications_pkey"),
        sa.UniqueConstraint("token", name="notifications_token_key"),
    )
    op.create_index("idx_notifications_user", "notifications", ["user_id"])

    # channels; the last_message_id foreign key is added once messages exists
    op.create_table(
        "channels",
        _uuid_pk(),
        sa.Column(
            "channel_type",
            sa.String(length=20),
            nullable=False,
            server_default=sa.text("'private'::character varying"),
        ),
        sa.Column("name", sa.String(length=255)),
        sa.Column("last_message_id", postgresql.UUID(as_uuid=True)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(
            "channel_type::text = ANY (ARRAY["
            "'private'::character varying, 'public'::character varying, "
            "'self'::character varying]::text[])",
            name="channels_channel_type_check",
        ),
        sa.PrimaryKeyConstraint("id", name="channels_pkey"),
    )

    # messages
    op.create_table(
        "messages",
        _uuid_pk(),
        sa.Column(
            "message_type",
            sa.String(length=20),
            nullable=False,
            server_default=sa.text("'text'::character varying"),
        ),
        sa.Column("text", sa.Text()),
        sa.Column(
            "image_urls",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'::text[]"),
        ),
        sa.Column(
            "file_urls",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'::text[]"),
        ),
        sa.Column("sender_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("channel_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(
            "message_type::text = ANY (ARRAY["
            "'text'::character varying, 'photo'::character varying, "
            "'file'::character varying]::text[])",
            name="messages_message_type_check",
        ),
        sa.ForeignKeyConstraint(
            ["channel_id"], ["channels.id"], ondelete="CASCADE", name="messages_channel_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["sender_id"], ["users.id"], ondelete="CASCADE", name="messages_sender_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="messages_pkey"),
    )
    op.create_index("idx_messages_channel_created", "messages", ["channel_id", "created_at"])
    op.create_index("idx_messages_sender", "messages", ["sender_id"])

    op.create_foreign_key(
        "channels_last_message_id_fkey",
        "channels",
        "messages",
        ["last_message_id"],
        ["id"],
        ondelete="SET NULL",
    )

    # memberships
    op.create_table(
        "memberships",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("channel_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("alert_mode", sa.String(length=20)),
        sa.Column(
            "membership_type",
            sa.String(length=20),
            nullable=False,
            server_default=sa.text("'member'::character varying"),
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "membership_type::text = ANY (ARRAY["
            "'owner'::character varying, 'member'::character varying]::text[])",
            name="memberships_membership_type_check",
        ),
        sa.ForeignKeyConstraint(
            ["channel_id"],
            ["channels.id"],
            ondelete="CASCADE",
            name="memberships_channel_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="memberships_user_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="memberships_pkey"),
        sa.UniqueConstraint(
            "user_id", "channel_id", name="memberships_user_id_channel_id_key"
        ),
    )
    op.create_index("idx_memberships_channel", "memberships", ["channel_id"])
    op.create_index("idx_memberships_user", "memberships", ["user_id"])

    # blocked_users
    op.create_table(
        "blocked_users",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blocked_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="blocked_users_user_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["blocked_user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="blocked_users_blocked_user_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="blocked_users_pkey"),
        sa.UniqueConstraint(
            "user_id", "blocked_user_id", name="blocked_users_user_id_blocked_user_id_key"
        ),
    )
    op.create_index("idx_blocked_users_user", "blocked_users", ["user_id"])


def downgrade() -> None:
    op.drop_table("blocked_users")
    op.drop_table("memberships")
    op.drop_constraint("channels_last_message_id_fkey", "channels", type_="foreignkey")
    op.drop_table("messages")
    op.drop_table("notifications")
    op.drop_table("channels")
    op.drop_table("users")
