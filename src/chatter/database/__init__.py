"""
Database module for the chatter backend
"""

from .connection import get_async_session, init_database

__all__ = ["get_async_session", "init_database"]
