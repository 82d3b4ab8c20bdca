"""
Chatter backend
GraphQL chat server with push notifications and media uploads
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
