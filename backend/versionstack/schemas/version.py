"""Pydantic schemas for versions and their files."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from versionstack.models import Version, VersionFile
from versionstack.schemas.common import CamelModel
from versionstack.storage import StoredFile, build_download_url


class VersionFileResponse(CamelModel):
    """File metadata with a download URL derived from current identifiers."""

    id: int | None = None
    file_name: str
    file_hash: str
    file_size: int
    hash_algorithm: Literal["sha256"] = "sha256"
    download_url: str

    @classmethod
    def from_model(cls, version_file: VersionFile, app_key: str, version_name: str):
        return cls(
            id=version_file.id,
            file_name=version_file.file_name,
            file_hash=version_file.file_hash,
            file_size=version_file.file_size,
            download_url=build_download_url(app_key, version_name, version_file.file_name),
        )

    @classmethod
    def from_stored(cls, stored: StoredFile, file_id: int | None = None):
        return cls(
            id=file_id,
            file_name=stored.file_name,
            file_hash=stored.file_hash,
            file_size=stored.file_size,
            download_url=stored.download_url,
        )


class VersionResponse(CamelModel):
    """A version; ``isActive`` is computed from the app's current version pointer."""

    id: int
    version_name: str
    is_active: bool
    created_at: datetime
    files: list[VersionFileResponse] = []

    @classmethod
    def build(
        cls,
        version: Version,
        files: list[VersionFile],
        app_key: str,
        current_version_id: int | None,
    ):
        return cls(
            id=version.id,
            version_name=version.version_name,
            is_active=version.id == current_version_id,
            created_at=version.created_at,
            files=[
                VersionFileResponse.from_model(f, app_key, version.version_name) for f in files
            ],
        )


class LatestVersionFile(CamelModel):
    file_name: str
    hash: str
    hash_algorithm: Literal["sha256"] = "sha256"
    size: int
    download_url: str


class LatestVersionResponse(CamelModel):
    """What update clients poll for."""

    version: str
    created_at: datetime
    files: list[LatestVersionFile]

    @classmethod
    def build(cls, version: Version, files: list[VersionFile], app_key: str):
        return cls(
            version=version.version_name,
            created_at=version.created_at,
            files=[
                LatestVersionFile(
                    file_name=f.file_name,
                    hash=f.file_hash,
                    size=f.file_size,
                    download_url=build_download_url(app_key, version.version_name, f.file_name),
                )
                for f in files
            ],
        )


class UploadVersionResponse(CamelModel):
    message: str = "Version uploaded and set as active"
    version: VersionResponse
    files: list[VersionFileResponse]


class SetActiveVersionRequest(CamelModel):
    version_id: int = Field(..., gt=0)
