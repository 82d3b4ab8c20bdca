"""Multipart upload endpoint for chat media."""

import os
import re
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ...auth import get_auth_context
from ...auth.context import AuthContext
from ...config import settings
from ...logging import get_logger
from ...storage import (
    SecurityException,
    StorageException,
    StorageProvider,
    get_storage_provider,
    validate_storage_key,
)

router = APIRouter(tags=["uploads"])
logger = get_logger(__name__)

_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]+(?![A-Za-z0-9])")


def split_extension(filename: str) -> tuple[str, str]:
    """
    Split `filename` into its base and its allowed extension.

    Clients may append a suffix after the extension
    (``photo.jpg_2026-01-01T00:00:00.000Z``). The last allowed extension
    found in the name is taken out of it, so the stored name can end with it.

    Raises:
        ValueError: If the name has extensions but none of them is allowed,
            with the final one as argument
    """
    allowed = {ext.lower() for ext in settings.allowed_upload_extensions}
    matches = list(_EXTENSION_PATTERN.finditer(filename))
    if not matches:
        return filename, ""
    for match in reversed(matches):
        ext = match.group().lower()
        if ext in allowed:
            return filename[: match.start()] + filename[match.end() :], ext
    raise ValueError(matches[-1].group().lower())


def _too_large(size: int) -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=(
            f"File size {size} bytes exceeds maximum allowed size "
            f"of {settings.max_upload_size} bytes"
        ),
    )


@router.post("/upload_single")
async def upload_single(
    dir: Annotated[str, Form()],
    input_file: Annotated[UploadFile, File(alias="inputFile")],
    auth_context: AuthContext = Depends(get_auth_context),
    storage: StorageProvider = Depends(get_storage_provider),
) -> dict:
    """
    Store one uploaded file under `dir` and return its public URL.

    Raises:
        HTTPException: 401 without a user, 400 for an invalid directory or
            extension, 413 when the file exceeds the size limit
    """
    if not auth_context.is_authenticated or not auth_context.user_id:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    filename = os.path.basename(input_file.filename or "") or "upload"
    try:
        base, file_ext = split_extension(filename)
    except ValueError as e:
        allowed_exts = ", ".join(settings.allowed_upload_extensions)
        raise HTTPException(
            status_code=400,
            detail=(
                f"File extension '{e.args[0]}' is not allowed. Allowed extensions: {allowed_exts}"
            ),
        ) from e

    if dir.startswith(("/", "\\")):
        logger.warning("Rejected absolute upload directory", dir=dir)
        raise HTTPException(status_code=400, detail="Invalid upload directory")
    try:
        key = validate_storage_key(f"{dir.strip('/')}/{uuid.uuid4().hex}_{base}{file_ext}")
    except SecurityException as e:
        logger.warning("Rejected upload directory", dir=dir, error=str(e))
        raise HTTPException(status_code=400, detail="Invalid upload directory") from e

    if input_file.size is not None and input_file.size > settings.max_upload_size:
        raise _too_large(input_file.size)
    content = await input_file.read(settings.max_upload_size + 1)
    if len(content) > settings.max_upload_size:
        raise _too_large(len(content))

    try:
        url = await storage.upload(
            key,
            content,
            input_file.content_type or "application/octet-stream",
            metadata={"uploaded_by": str(auth_context.user_id), "filename": filename},
        )
    except SecurityException as e:
        raise HTTPException(status_code=400, detail="Invalid upload directory") from e
    except StorageException as e:
        logger.error("Failed to store upload", key=key, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to store file") from e

    logger.info(
        "File upload successful",
        key=key,
        file_size=len(content),
        user_id=str(auth_context.user_id),
    )
    return {"url": url}
