"""Temporary on-disk copies of uploaded files."""

import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import UploadFile

from config import settings

logger = logging.getLogger(__name__)


class UploadTooLargeError(ValueError):
    pass


@asynccontextmanager
async def spooled_upload(upload: UploadFile, max_bytes: int | None = None) -> AsyncIterator[Path]:
    """Write ``upload`` to a temp file and yield its path.

    The file is deleted on every exit path, including exceptions raised by the
    body of the ``async with`` block.
    """
    suffix = Path(upload.filename or "").suffix.lower()
    tmp_dir = settings.upload_tmp_dir or None
    if tmp_dir:
        os.makedirs(tmp_dir, exist_ok=True)

    fd, name = tempfile.mkstemp(suffix=suffix, dir=tmp_dir)
    path = Path(name)
    try:
        content = await upload.read()
        if max_bytes is not None and len(content) > max_bytes:
            raise UploadTooLargeError(f"Upload exceeds {max_bytes} bytes")
        with os.fdopen(fd, "wb") as fh:
            fd = -1
            fh.write(content)
        yield path
    finally:
        if fd != -1:
            os.close(fd)
        path.unlink(missing_ok=True)
        logger.debug("Removed temp upload %s", path)
