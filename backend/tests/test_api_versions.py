"""Tests for the version API endpoints."""

import hashlib

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from versionstack.models import AuditLog, Version

APPS_URL = "/api/v1/apps"


def firmware_file(name: str = "fw.bin", content: bytes = b"0123456789"):
    return ("files", (name, content, "application/octet-stream"))


async def upload(client: AsyncClient, headers, app_key="firmware", files=None, version_name=None):
    data = {"versionName": version_name} if version_name is not None else None
    return await client.post(
        f"{APPS_URL}/{app_key}/versions",
        files=files or [firmware_file()],
        data=data,
        headers=headers,
    )


class TestUploadVersion:
    """Test multipart uploads."""

    @pytest.mark.asyncio
    async def test_upload_sets_active(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")

        response = await upload(client, auth_headers("write"))

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Version uploaded and set as active"
        assert data["version"]["versionName"] == "1.0.0"
        assert data["version"]["isActive"] is True
        file = data["files"][0]
        assert file["fileName"] == "fw.bin"
        assert file["fileSize"] == 10
        assert file["fileHash"] == hashlib.sha256(b"0123456789").hexdigest()
        assert file["hashAlgorithm"] == "sha256"
        assert file["downloadUrl"] == "/files/firmware/1.0.0/fw.bin"

    @pytest.mark.asyncio
    async def test_explicit_name_and_several_files(
        self, client: AsyncClient, make_app, auth_headers, content_store
    ):
        await make_app(app_key="firmware")

        response = await upload(
            client,
            auth_headers("write"),
            files=[firmware_file("a.bin", b"a"), firmware_file("b.bin", b"bb")],
            version_name="2.0.0-rc1",
        )

        assert response.status_code == 201
        assert response.json()["version"]["versionName"] == "2.0.0-rc1"
        assert sorted(f["fileName"] for f in response.json()["files"]) == ["a.bin", "b.bin"]
        assert content_store.file_path("firmware", "2.0.0-rc1", "b.bin").read_bytes() == b"bb"

    @pytest.mark.asyncio
    async def test_unsafe_file_name_is_sanitized(
        self, client: AsyncClient, make_app, auth_headers, content_store
    ):
        await make_app(app_key="firmware")

        response = await upload(client, auth_headers("write"), files=[firmware_file("fw?.bin")])

        assert response.status_code == 201
        assert response.json()["files"][0]["fileName"] == "fw.bin"
        assert content_store.file_path("firmware", "1.0.0", "fw.bin").exists()

    @pytest.mark.asyncio
    async def test_duplicate_name_conflict(
        self, client: AsyncClient, make_app, auth_headers, db_session
    ):
        await make_app(app_key="firmware")
        headers = auth_headers("write")
        assert (await upload(client, headers, version_name="1.0.0")).status_code == 201

        response = await upload(client, headers, version_name="1.0.0")

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"
        count = await db_session.execute(select(func.count(Version.id)))
        assert count.scalar() == 1

    @pytest.mark.asyncio
    async def test_bad_version_name(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        response = await upload(client, auth_headers("write"), version_name="1.0 beta")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_no_files(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        response = await client.post(
            f"{APPS_URL}/firmware/versions",
            data={"versionName": "1.0.0"},
            headers=auth_headers("write"),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_app(self, client: AsyncClient, auth_headers, tmp_path):
        response = await upload(client, auth_headers("write"), app_key="ghost")
        assert response.status_code == 404
        # Spooled temp files are cleaned up on failure
        assert list((tmp_path / "tmp_uploads").iterdir()) == []

    @pytest.mark.asyncio
    async def test_read_token_cannot_upload(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        response = await upload(client, auth_headers("read"))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_out_of_scope_upload(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        response = await upload(client, auth_headers("write", ["tools"]))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_upload_audit_carries_actor(
        self, client: AsyncClient, make_app, auth_headers, db_session
    ):
        await make_app(app_key="firmware")
        headers = {**auth_headers("write", key_id=42), "X-Forwarded-For": "203.0.113.5, 10.0.0.1"}

        await upload(client, headers)

        result = await db_session.execute(
            select(AuditLog).where(AuditLog.action == "version.upload")
        )
        entry = result.scalar_one()
        assert entry.actor_key_id == 42
        assert entry.actor_ip == "203.0.113.5"


class TestListAndLatest:
    """Test listing and the update-client endpoint."""

    @pytest.mark.asyncio
    async def test_list_marks_active(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        headers = auth_headers("write")
        await upload(client, headers)
        await upload(client, headers)

        response = await client.get(f"{APPS_URL}/firmware/versions", headers=headers)

        assert response.status_code == 200
        versions = response.json()
        assert [v["versionName"] for v in versions] == ["1.0.1", "1.0.0"]
        assert [v["isActive"] for v in versions] == [True, False]
        assert versions[0]["files"][0]["downloadUrl"] == "/files/firmware/1.0.1/fw.bin"

    @pytest.mark.asyncio
    async def test_latest_public_without_token(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="tools", is_public=True)
        await upload(client, auth_headers("write"), app_key="tools")

        response = await client.get(f"{APPS_URL}/tools/latest")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "1.0.0"
        assert data["files"][0]["hash"] == hashlib.sha256(b"0123456789").hexdigest()
        assert data["files"][0]["size"] == 10
        assert data["files"][0]["hashAlgorithm"] == "sha256"
        assert data["files"][0]["downloadUrl"] == "/files/tools/1.0.0/fw.bin"

    @pytest.mark.asyncio
    async def test_latest_private(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware", is_public=False)
        await upload(client, auth_headers("write"))

        assert (await client.get(f"{APPS_URL}/firmware/latest")).status_code == 401

        response = await client.get(
            f"{APPS_URL}/firmware/latest", headers=auth_headers("read", ["tools"])
        )
        assert response.status_code == 403

        response = await client.get(
            f"{APPS_URL}/firmware/latest", headers=auth_headers("read", ["firmware"])
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_latest_without_versions(self, client: AsyncClient, make_app):
        await make_app(app_key="tools", is_public=True)
        response = await client.get(f"{APPS_URL}/tools/latest")
        assert response.status_code == 404
        assert response.json()["code"] == "VERSION_NOT_FOUND"


class TestActivateAndDelete:
    """Test switching and deleting versions."""

    @pytest.mark.asyncio
    async def test_switch_then_delete(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware", is_public=True)
        headers = auth_headers("write")
        first = (await upload(client, headers)).json()["version"]
        second = (await upload(client, headers)).json()["version"]

        response = await client.delete(
            f"{APPS_URL}/firmware/versions/{second['id']}", headers=headers
        )
        assert response.status_code == 400

        response = await client.put(
            f"{APPS_URL}/firmware/active-version", json={"versionId": first["id"]}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["isActive"] is True
        assert response.json()["versionName"] == "1.0.0"

        latest = await client.get(f"{APPS_URL}/firmware/latest")
        assert latest.json()["version"] == "1.0.0"

        response = await client.delete(
            f"{APPS_URL}/firmware/versions/{second['id']}", headers=headers
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Version deleted successfully"}

    @pytest.mark.asyncio
    async def test_activate_rejects_bad_body(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        response = await client.put(
            f"{APPS_URL}/firmware/active-version", json={"versionId": 0}, headers=auth_headers()
        )
        assert response.status_code == 400
        assert "versionId" in response.json()["details"]

    @pytest.mark.asyncio
    async def test_activate_version_of_other_app(
        self, client: AsyncClient, make_app, auth_headers
    ):
        await make_app(app_key="firmware")
        await make_app(app_key="tools")
        headers = auth_headers("write")
        other = (await upload(client, headers, app_key="tools")).json()["version"]

        response = await client.put(
            f"{APPS_URL}/firmware/active-version", json={"versionId": other["id"]}, headers=headers
        )
        assert response.status_code == 404
        assert response.json()["code"] == "VERSION_NOT_FOUND"
