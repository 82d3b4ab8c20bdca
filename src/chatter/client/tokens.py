"""Local persistence of the client's bearer token."""

from __future__ import annotations

import json
from pathlib import Path

import aiofiles

from ..logging import get_logger

logger = get_logger(__name__)


class TokenStore:
    """Keeps the bearer token in a small JSON file: ``{"token": "..."}``."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def get_token(self) -> str | None:
        if not self.path.exists():
            return None

        async with aiofiles.open(self.path) as f:
            raw = await f.read()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable token file", path=str(self.path))
            return None

        token = data.get("token") if isinstance(data, dict) else None
        return token or None
