"""Push notification fan-out for new messages."""

from .client import ExpoPushClient, PushDeliveryError
from .dispatcher import DispatchStats, PushDispatcher, get_push_dispatcher
from .models import ExpoMessage
from .service import build_message_notifications, get_receivers_push_tokens

__all__ = [
    "DispatchStats",
    "ExpoMessage",
    "ExpoPushClient",
    "PushDeliveryError",
    "PushDispatcher",
    "build_message_notifications",
    "get_push_dispatcher",
    "get_receivers_push_tokens",
]
