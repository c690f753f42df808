"""Tests for audit, stats and health endpoints."""

import pytest
from httpx import AsyncClient

from versionstack import __version__


class TestAuditEndpoint:
    """Test GET /audit."""

    @pytest.mark.asyncio
    async def test_admin_only(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/audit", headers=auth_headers("write"))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_lists_actions_with_filters(self, client: AsyncClient, auth_headers):
        headers = auth_headers("admin")
        await client.post("/api/v1/apps", json={"appKey": "firmware"}, headers=headers)
        await client.post("/api/v1/apps", json={"appKey": "tools"}, headers=headers)
        await client.put(
            "/api/v1/apps/tools", json={"isPublic": True}, headers=headers
        )

        response = await client.get("/api/v1/audit", headers=headers)
        body = response.json()
        assert response.status_code == 200
        assert body["pagination"] == {"total": 3, "limit": 100, "offset": 0}
        assert [e["action"] for e in body["data"]] == ["app.update", "app.create", "app.create"]

        response = await client.get(
            "/api/v1/audit",
            params={"action": "app.create", "entityId": "tools"},
            headers=headers,
        )
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["entityType"] == "app"
        assert body["data"][0]["entityId"] == "tools"

    @pytest.mark.asyncio
    async def test_rejects_bad_paging(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/v1/audit", params={"offset": -1}, headers=auth_headers("admin")
        )
        assert response.status_code == 400
        assert "offset" in response.json()["details"]


class TestStatsEndpoint:
    """Test GET /stats."""

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        assert (await client.get("/api/v1/stats")).status_code == 401

    @pytest.mark.asyncio
    async def test_counts(self, client: AsyncClient, make_app, auth_headers):
        await make_app(app_key="firmware")
        await client.post(
            "/api/v1/apps/firmware/versions",
            files=[("files", ("fw.bin", b"0123456789", "application/octet-stream"))],
            headers=auth_headers("write"),
        )

        response = await client.get("/api/v1/stats", headers=auth_headers("read"))

        assert response.status_code == 200
        assert response.json() == {
            "totalApps": 1,
            "totalVersions": 1,
            "totalStorageBytes": 10,
            "appsWithActiveVersion": 1,
            "recentUploads": 1,
        }


class TestHealthEndpoints:
    """Test health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["checks"]["database"]["status"] == "up"

    @pytest.mark.asyncio
    async def test_live(self, client: AsyncClient):
        response = await client.get("/api/v1/health/live")
        assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test_ready(self, client: AsyncClient):
        response = await client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"
