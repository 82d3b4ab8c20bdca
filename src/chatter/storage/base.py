"""Storage provider interface and key validation for uploaded media."""

import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable
from typing import Any

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StorageException(Exception):
    """A storage backend failed to read or write."""


class SecurityException(StorageException):
    """A key points outside the storage root."""


def validate_storage_key(key: str) -> str:
    """
    Return `key` with unsafe characters removed from each path segment.

    Raises:
        SecurityException: For absolute keys, ``..``, backslashes, and
            segments that are empty or only dots once sanitized
    """
    if not key or key.startswith("/") or ".." in key or "\\" in key:
        raise SecurityException(f"Invalid storage key: {key}")

    segments = [_UNSAFE_KEY_CHARS.sub("", segment) for segment in key.split("/")]
    for original, segment in zip(key.split("/"), segments, strict=True):
        if not segment.strip("."):
            raise SecurityException(f"Invalid key component: {original}")
    return "/".join(segments)


class StorageProvider(ABC):
    @abstractmethod
    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterable[bytes],
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Store `content` under `key` and return the URL clients fetch it from.

        Raises:
            StorageException: If the content cannot be written
            SecurityException: If `key` resolves outside the storage root
        """
