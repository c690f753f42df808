"""Spool multipart uploads to temp files before they reach the version service."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from fastapi import UploadFile

from versionstack.exceptions import StorageError
from versionstack.storage.content_store import DEFAULT_CHUNK_SIZE, UploadedFile

logger = logging.getLogger(__name__)


async def spool_upload(
    upload: UploadFile, tmp_dir: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> UploadedFile:
    """
    Copy one multipart upload to a private temp file in chunks.

    Args:
        upload: Incoming multipart file
        tmp_dir: Directory for temp files (same filesystem as the store keeps moves atomic)
        chunk_size: Bytes per read

    Returns:
        UploadedFile descriptor pointing at the temp file
    """
    tmp_dir = Path(tmp_dir)
    try:
        await asyncio.to_thread(tmp_dir.mkdir, parents=True, exist_ok=True)
        fd, name = await asyncio.to_thread(tempfile.mkstemp, prefix="upload-", dir=tmp_dir)
    except OSError as e:
        logger.error(f"Failed to create temp file in {tmp_dir}: {e}")
        raise StorageError("Failed to receive uploaded file") from e
    temporary_path = Path(name)
    size = 0
    try:
        with os.fdopen(fd, "wb") as handle:
            while chunk := await upload.read(chunk_size):
                await asyncio.to_thread(handle.write, chunk)
                size += len(chunk)
    except OSError as e:
        temporary_path.unlink(missing_ok=True)
        logger.error(f"Failed to spool upload: {e}")
        raise StorageError("Failed to receive uploaded file") from e
    finally:
        await upload.close()

    return UploadedFile(
        temporary_path=temporary_path,
        original_file_name=upload.filename or "",
        size_bytes=size,
    )


async def spool_uploads(
    uploads: list[UploadFile], tmp_dir: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> list[UploadedFile]:
    """Spool every upload; on failure remove the ones already written."""
    spooled: list[UploadedFile] = []
    try:
        for upload in uploads:
            spooled.append(await spool_upload(upload, tmp_dir, chunk_size))
    except Exception:
        for uploaded in spooled:
            uploaded.temporary_path.unlink(missing_ok=True)
        raise
    return spooled
