"""On-disk content store for version files.

Layout: ``<root>/<appKey>/<versionName>/<sanitizedFileName>``. The database
is the authority for what exists; this module only places, hashes and
removes bytes.
"""

import asyncio
import errno
import hashlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from versionstack.exceptions import StorageError, ValidationError
from versionstack.utils.log_redaction import sanitize_for_log
from versionstack.validators import sanitize_file_name

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


@dataclass
class UploadedFile:
    """An upload spooled to a temporary path, not yet committed to the store."""

    temporary_path: Path
    original_file_name: str
    size_bytes: int


@dataclass
class StoredFile:
    """Result of moving an upload into the store."""

    file_name: str
    file_hash: str
    file_size: int
    download_url: str


def build_download_url(app_key: str, version_name: str, file_name: str) -> str:
    """Download links are always derived from current identifiers, never stored."""
    return f"/files/{app_key}/{version_name}/{file_name}"


def hash_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[str, int]:
    """
    Stream a file through SHA-256.

    Args:
        path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        Tuple of (lowercase hex digest, number of bytes read)
    """
    digest = hashlib.sha256()
    total = 0
    with open(path, "rb") as handle:
        while chunk := handle.read(chunk_size):
            digest.update(chunk)
            total += len(chunk)
    return digest.hexdigest(), total


class ContentStore:
    """Maps (appKey, versionName, fileName) to files under a private root."""

    def __init__(self, root: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize the content store.

        Args:
            root: Directory that holds every app subtree
            chunk_size: Read size used when hashing
        """
        self.root = Path(root).resolve()
        self.chunk_size = chunk_size

    def _resolve_inside_root(self, *parts: str) -> Path:
        """Join path components and refuse anything that escapes the root."""
        for part in parts:
            if not part or part in (".", "..") or "/" in part or "\\" in part or "\x00" in part:
                raise ValidationError("Invalid path component", details={"path": [part]})
        target = self.root.joinpath(*parts).resolve()
        try:
            target.relative_to(self.root)
        except ValueError:
            raise ValidationError("Invalid path: outside content store")
        return target

    def app_dir(self, app_key: str) -> Path:
        return self._resolve_inside_root(app_key)

    def version_dir(self, app_key: str, version_name: str) -> Path:
        return self._resolve_inside_root(app_key, version_name)

    def file_path(self, app_key: str, version_name: str, file_name: str) -> Path:
        return self._resolve_inside_root(app_key, version_name, file_name)

    async def save_file(
        self, app_key: str, version_name: str, uploaded: UploadedFile
    ) -> StoredFile:
        """
        Hash an uploaded temp file and atomically move it into place.

        The digest is computed from the temp file before the rename, so the
        returned hash describes exactly the bytes that land at the target.

        Args:
            app_key: Owning app key
            version_name: Owning version name
            uploaded: Spooled upload descriptor

        Returns:
            StoredFile with sanitized name, hash, size and download URL

        Raises:
            ValidationError: If the file name is empty after sanitizing
            StorageError: On any filesystem failure
        """
        file_name = sanitize_file_name(uploaded.original_file_name)
        if not file_name:
            raise ValidationError(
                "Invalid file name",
                details={"files": [sanitize_for_log(uploaded.original_file_name)]},
            )

        target_path = self.file_path(app_key, version_name, file_name)
        source_path = Path(uploaded.temporary_path)

        try:
            await asyncio.to_thread(target_path.parent.mkdir, parents=True, exist_ok=True)
            file_hash, file_size = await asyncio.to_thread(hash_file, source_path, self.chunk_size)
            await asyncio.to_thread(self._move_into_place, source_path, target_path)
        except OSError as e:
            logger.error(
                f"Failed to store {sanitize_for_log(file_name)} for "
                f"{sanitize_for_log(app_key)}/{sanitize_for_log(version_name)}: {e}"
            )
            raise StorageError(f"Failed to store file {file_name}") from e

        logger.debug(f"Stored {app_key}/{version_name}/{sanitize_for_log(file_name)} ({file_size} bytes)")

        return StoredFile(
            file_name=file_name,
            file_hash=file_hash,
            file_size=file_size,
            download_url=build_download_url(app_key, version_name, file_name),
        )

    @staticmethod
    def _move_into_place(source: Path, target: Path) -> None:
        """Rename source onto target; across filesystems, copy beside the target then rename."""
        try:
            os.replace(source, target)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            # Short random name: the target name alone may already use the whole limit
            fd, partial_name = tempfile.mkstemp(prefix=".partial-", dir=target.parent)
            os.close(fd)
            partial = Path(partial_name)
            try:
                shutil.copyfile(source, partial)
                os.replace(partial, target)
            except OSError:
                partial.unlink(missing_ok=True)
                raise
            source.unlink(missing_ok=True)

    async def delete_file(self, app_key: str, version_name: str, file_name: str) -> None:
        """Delete one stored file. A missing file is not an error."""
        path = self.file_path(app_key, version_name, file_name)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete {sanitize_for_log(str(path))}: {e}")
            raise StorageError(f"Failed to delete file {file_name}") from e

    async def delete_version_directory(self, app_key: str, version_name: str) -> None:
        """Remove a version directory only when it is empty."""
        path = self.version_dir(app_key, version_name)

        def _remove_if_empty() -> None:
            if not path.is_dir():
                return
            if any(path.iterdir()):
                logger.warning(
                    f"Version directory {app_key}/{sanitize_for_log(version_name)} "
                    "is not empty, leaving it in place"
                )
                return
            path.rmdir()

        try:
            await asyncio.to_thread(_remove_if_empty)
        except OSError as e:
            logger.error(f"Failed to remove version directory {sanitize_for_log(str(path))}: {e}")
            raise StorageError(f"Failed to remove version directory {version_name}") from e

    async def delete_app_directory(self, app_key: str) -> None:
        """Recursively remove an app subtree. Call only after the app row is gone."""
        path = self.app_dir(app_key)

        def _remove_tree() -> None:
            if path.exists():
                shutil.rmtree(path)

        try:
            await asyncio.to_thread(_remove_tree)
        except OSError as e:
            logger.error(f"Failed to remove app directory {sanitize_for_log(str(path))}: {e}")
            raise StorageError(f"Failed to remove files for app {app_key}") from e

    def cleanup_temp_files(self, files: list[UploadedFile]) -> None:
        """Best-effort removal of uncommitted upload temp files. Never raises."""
        for uploaded in files:
            try:
                Path(uploaded.temporary_path).unlink(missing_ok=True)
            except Exception as e:
                logger.warning(
                    f"Could not remove temp upload {sanitize_for_log(str(uploaded.temporary_path))}: {e}"
                )
