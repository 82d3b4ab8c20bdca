"""Python client helpers for the chatter API."""

from .settings import ClientSettings
from .tokens import TokenStore
from .upload import (
    UploadError,
    UploadHTTPError,
    UploadNetworkError,
    UploadRejectedError,
    UploadServerError,
    upload_file,
)

__all__ = [
    "ClientSettings",
    "TokenStore",
    "UploadError",
    "UploadHTTPError",
    "UploadNetworkError",
    "UploadRejectedError",
    "UploadServerError",
    "upload_file",
]
