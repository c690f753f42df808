"""File storage for version contents."""

from versionstack.storage.content_store import (
    ContentStore,
    StoredFile,
    UploadedFile,
    build_download_url,
    hash_file,
)
from versionstack.storage.uploads import spool_upload, spool_uploads

__all__ = [
    "ContentStore",
    "StoredFile",
    "UploadedFile",
    "build_download_url",
    "hash_file",
    "spool_upload",
    "spool_uploads",
]
