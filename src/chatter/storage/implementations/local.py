"""Local filesystem storage for uploaded chat media."""

import json
from collections.abc import AsyncIterable
from pathlib import Path
from typing import Any
from urllib.parse import quote

import aiofiles

from ...logging import get_logger
from ..base import SecurityException, StorageException, StorageProvider

logger = get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    """Stores files below `base_path` and serves them from `public_url_base`."""

    def __init__(self, base_path: Path | str, public_url_base: str | None = None):
        self.base_path = Path(base_path).resolve()
        self.public_url_base = public_url_base
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_safe_file_path(self, key: str) -> Path:
        file_path = (self.base_path / key).resolve()
        try:
            file_path.relative_to(self.base_path)
        except ValueError as e:
            raise SecurityException(f"Path traversal detected: {key}") from e
        return file_path

    def _metadata_path(self, file_path: Path) -> Path:
        return file_path.with_suffix(file_path.suffix + ".meta")

    def _get_public_url(self, key: str) -> str:
        if self.public_url_base:
            return f"{self.public_url_base.rstrip('/')}/{quote(key, safe='/')}"
        return f"file://{self.base_path / key}"

    async def upload(
        self,
        key: str,
        content: bytes | bytearray | memoryview | AsyncIterable[bytes],
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        file_path = self._get_safe_file_path(key)
        logger.info("Storing upload", key=key, content_type=content_type)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                if isinstance(content, bytes | bytearray | memoryview):
                    await f.write(content)
                else:
                    async for chunk in content:
                        await f.write(chunk)

            sidecar = {"content_type": content_type, **(metadata or {})}
            async with aiofiles.open(self._metadata_path(file_path), "w") as f:
                await f.write(json.dumps(sidecar, indent=2))
        except OSError as e:
            logger.error("File system error storing upload", key=key, error=str(e))
            raise StorageException(f"Failed to write file: {e}") from e

        return self._get_public_url(key)
