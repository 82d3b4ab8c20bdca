"""
Message GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import inspect

from .user import User

if TYPE_CHECKING:
    from ...dbmodels import Messages


@strawberry.enum
class MessageType(Enum):
    """Message content type."""

    TEXT = "text"
    PHOTO = "photo"
    FILE = "file"


@strawberry.type
class Message:
    """Message type for GraphQL API."""

    id: strawberry.ID
    message_type: MessageType
    text: str | None
    image_urls: list[str]
    file_urls: list[str]
    sender_id: strawberry.ID
    channel_id: strawberry.ID
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None
    sender: User | None = None

    @classmethod
    def from_model(cls, message: "Messages") -> "Message":
        """Convert a row; the sender is included only when it was eagerly loaded."""
        sender = None
        if "sender" not in inspect(message).unloaded and message.sender is not None:
            sender = User.from_model(message.sender)

        return cls(
            id=strawberry.ID(str(message.id)),
            message_type=MessageType(message.message_type or "text"),
            text=message.text,
            image_urls=list(message.image_urls or []),
            file_urls=list(message.file_urls or []),
            sender_id=strawberry.ID(str(message.sender_id)),
            channel_id=strawberry.ID(str(message.channel_id)),
            created_at=message.created_at,
            updated_at=message.updated_at,
            deleted_at=message.deleted_at,
            sender=sender,
        )
