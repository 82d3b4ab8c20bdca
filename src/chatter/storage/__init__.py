"""Storage for uploaded files."""

from functools import lru_cache

from ..config import settings
from .base import (
    SecurityException,
    StorageException,
    StorageProvider,
    validate_storage_key,
)
from .implementations.local import LocalStorageProvider


@lru_cache(maxsize=1)
def get_storage_provider() -> StorageProvider:
    """Storage provider configured by `storage_base_path` and `storage_public_url`."""
    return LocalStorageProvider(settings.storage_base_path, settings.storage_public_url)


__all__ = [
    "LocalStorageProvider",
    "SecurityException",
    "StorageException",
    "StorageProvider",
    "get_storage_provider",
    "validate_storage_key",
]
