"""
Database models for chatter (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    DateTime,
    ForeignKeyConstraint,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text as sql_text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint(
            "auth_provider", "auth_subject", name="users_auth_provider_auth_subject_key"
        ),
        Index("idx_users_email", "email"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    auth_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    auth_subject: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255))
    nickname: Mapped[str | None] = mapped_column(String(255))
    photo_url: Mapped[str | None] = mapped_column(Text)
    status_message: Mapped[str | None] = mapped_column(Text)
    last_signed_in_at: Mapped[datetime | None] = mapped_column(DateTime(True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    notifications: Mapped[list["Notifications"]] = relationship(
        "Notifications", uselist=True, back_populates="user"
    )
    memberships: Mapped[list["Memberships"]] = relationship(
        "Memberships", uselist=True, back_populates="user"
    )
    messages: Mapped[list["Messages"]] = relationship(
        "Messages", uselist=True, back_populates="sender"
    )


class Notifications(Base):
    """Push tokens registered by a user's devices."""

    __tablename__ = "notifications"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="notifications_user_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="notifications_pkey"),
        UniqueConstraint("token", name="notifications_token_key"),
        Index("idx_notifications_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    token: Mapped[str] = mapped_column(String(255), nullable=False)
    device: Mapped[str | None] = mapped_column(String(255))
    os: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )

    user: Mapped["Users"] = relationship("Users", back_populates="notifications")


class Channels(Base):
    __tablename__ = "channels"
    __table_args__ = (
        CheckConstraint(
            "channel_type::text = ANY (ARRAY["
            "'private'::character varying, 'public'::character varying, "
            "'self'::character varying]::text[])",
            name="channels_channel_type_check",
        ),
        # Circular with messages.channel_id, so the constraint is added after both tables
        ForeignKeyConstraint(
            ["last_message_id"],
            ["messages.id"],
            ondelete="SET NULL",
            name="channels_last_message_id_fkey",
            use_alter=True,
        ),
        PrimaryKeyConstraint("id", name="channels_pkey"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    channel_type: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=sql_text("'private'::character varying")
    )
    name: Mapped[str | None] = mapped_column(String(255))
    last_message_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    messages: Mapped[list["Messages"]] = relationship(
        "Messages",
        uselist=True,
        foreign_keys="[Messages.channel_id]",
        back_populates="channel",
    )
    last_message: Mapped["Messages | None"] = relationship(
        "Messages", foreign_keys=[last_message_id], post_update=True
    )
    memberships: Mapped[list["Memberships"]] = relationship(
        "Memberships", uselist=True, back_populates="channel"
    )


class Messages(Base):
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "message_type::text = ANY (ARRAY["
            "'text'::character varying, 'photo'::character varying, "
            "'file'::character varying]::text[])",
            name="messages_message_type_check",
        ),
        ForeignKeyConstraint(
            ["channel_id"],
            ["channels.id"],
            ondelete="CASCADE",
            name="messages_channel_id_fkey",
        ),
        ForeignKeyConstraint(
            ["sender_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="messages_sender_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="messages_pkey"),
        Index("idx_messages_channel_created", "channel_id", "created_at"),
        Index("idx_messages_sender", "sender_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    message_type: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=sql_text("'text'::character varying")
    )
    text: Mapped[str | None] = mapped_column(Text)
    image_urls: Mapped[list[str]] = mapped_column(
        ARRAY(Text()), server_default=sql_text("'{}'::text[]")
    )
    file_urls: Mapped[list[str]] = mapped_column(
        ARRAY(Text()), server_default=sql_text("'{}'::text[]")
    )
    sender_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    channel_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    sender: Mapped["Users"] = relationship("Users", back_populates="messages")
    channel: Mapped["Channels"] = relationship(
        "Channels", foreign_keys=[channel_id], back_populates="messages"
    )


class Memberships(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        CheckConstraint(
            "membership_type::text = ANY (ARRAY["
            "'owner'::character varying, 'member'::character varying]::text[])",
            name="memberships_membership_type_check",
        ),
        ForeignKeyConstraint(
            ["channel_id"],
            ["channels.id"],
            ondelete="CASCADE",
            name="memberships_channel_id_fkey",
        ),
        ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="memberships_user_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="memberships_pkey"),
        UniqueConstraint("user_id", "channel_id", name="memberships_user_id_channel_id_key"),
        Index("idx_memberships_channel", "channel_id"),
        Index("idx_memberships_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    channel_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    alert_mode: Mapped[str | None] = mapped_column(String(20))
    membership_type: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=sql_text("'member'::character varying")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )

    user: Mapped["Users"] = relationship("Users", back_populates="memberships")
    channel: Mapped["Channels"] = relationship("Channels", back_populates="memberships")


class BlockedUsers(Base):
    __tablename__ = "blocked_users"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="blocked_users_user_id_fkey",
        ),
        ForeignKeyConstraint(
            ["blocked_user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="blocked_users_blocked_user_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="blocked_users_pkey"),
        UniqueConstraint(
            "user_id", "blocked_user_id", name="blocked_users_user_id_blocked_user_id_key"
        ),
        Index("idx_blocked_users_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, server_default=sql_text("uuid_generate_v4()"))
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    blocked_user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=sql_text("CURRENT_TIMESTAMP")
    )

    user: Mapped["Users"] = relationship("Users", foreign_keys=[user_id])
    blocked_user: Mapped["Users"] = relationship("Users", foreign_keys=[blocked_user_id])


# Expose for Alembic
target_metadata = Base.metadata
