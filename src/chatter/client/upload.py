"""
Upload helper for chat media.

Posts a local file to the server's ``/upload_single`` endpoint as multipart
form data and hands back the raw response. Failures are raised as
`UploadError` subclasses that keep the kind of failure and its cause.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiofiles
import httpx

from ..logging import get_logger
from .settings import ClientSettings
from .tokens import TokenStore

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"


class UploadError(Exception):
    """Base exception for upload failures."""


class UploadNetworkError(UploadError):
    """The server could not be reached or the connection failed mid-request."""


class UploadHTTPError(UploadError):
    """The server answered with an error status."""

    def __init__(self, message: str, response: httpx.Response):
        super().__init__(message)
        self.response = response
        self.status_code = response.status_code


class UploadRejectedError(UploadHTTPError):
    """4xx: the server refused the upload (auth, size, type, directory)."""


class UploadServerError(UploadHTTPError):
    """5xx: the server failed while handling the upload."""


def _local_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


def upload_file_name(uri: str, file_name_suffix: str | None = None) -> str:
    """Last path segment of `uri` followed by the optional suffix."""
    name = uri.rstrip("/").split("/")[-1]
    return f"{name}{file_name_suffix}" if file_name_suffix else name


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code >= 500:
        raise UploadServerError(
            f"Upload failed with server error {response.status_code}", response
        )
    if response.status_code >= 400:
        raise UploadRejectedError(
            f"Upload rejected with status {response.status_code}: {response.text[:200]}",
            response,
        )


async def upload_file(
    uri: str,
    dir: str,
    file_name_suffix: str | None = None,
    *,
    settings: ClientSettings | None = None,
    token_store: TokenStore | None = None,
    client: httpx.AsyncClient | None = None,
    raise_for_status: bool = True,
) -> httpx.Response:
    """Upload the file at `uri` into server directory `dir`.

    Args:
        uri: Local path or ``file://`` URI of the file
        dir: Target directory on the server
        file_name_suffix: Appended to the file name sent to the server
        settings: Client settings; read from the environment when omitted
        token_store: Source of the bearer token; defaults to ``settings.token_path``
        client: HTTP client to use; a short-lived one is created when omitted
        raise_for_status: Raise for 4xx/5xx responses instead of returning them

    Returns:
        The server's response

    Raises:
        UploadError: If the local file cannot be read
        UploadNetworkError: If the request fails in transport
        UploadRejectedError: On a 4xx response
        UploadServerError: On a 5xx response
    """
    settings = settings or ClientSettings()
    token_store = token_store or TokenStore(settings.token_path)

    file_name = upload_file_name(uri, file_name_suffix)
    content_type = guess_content_type(uri)

    try:
        async with aiofiles.open(_local_path(uri), "rb") as f:
            content = await f.read()
    except OSError as e:
        raise UploadError(f"Cannot read file to upload: {uri}") from e

    headers = {"Accept": "application/json"}
    token = await token_store.get_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"

    url = f"{settings.root_url.rstrip('/')}/upload_single"
    request_kwargs = {
        "files": {"inputFile": (file_name, content, content_type)},
        "data": {"dir": dir},
        "headers": headers,
    }

    logger.debug("Uploading file", url=url, file_name=file_name, content_type=content_type)
    try:
        if client is not None:
            response = await client.post(url, **request_kwargs)
        else:
            async with httpx.AsyncClient(timeout=settings.timeout_seconds) as owned_client:
                response = await owned_client.post(url, **request_kwargs)
    except httpx.TransportError as e:
        logger.warning("Upload request failed", url=url, error=str(e))
        raise UploadNetworkError(f"Upload to {url} failed: {e}") from e

    if raise_for_status:
        _raise_for_status(response)

    return response
