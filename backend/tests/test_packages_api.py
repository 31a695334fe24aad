"""
Tests for Package API endpoints.
"""
import pytest
from decimal import Decimal
from httpx import AsyncClient


class TestPackagesCRUD:

    @pytest.mark.asyncio
    async def test_create_ho_package(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/packages",
            json={"name": "HO Annual", "period_months": 12, "basic_fees": "25000.00", "gst_rate": "18"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["is_venue_fee"] is False
        assert data["chapter_id"] is None
        assert Decimal(data["basic_fees"]) == Decimal("25000.00")

    @pytest.mark.asyncio
    async def test_venue_package_requires_chapter(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/packages",
            json={"name": "Venue", "period_months": 12, "is_venue_fee": True, "basic_fees": "12000.00"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_venue_package_with_unknown_chapter(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/packages",
            json={
                "name": "Venue", "period_months": 12, "is_venue_fee": True,
                "chapter_id": "doesnotexist123", "basic_fees": "12000.00",
            },
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_filters(self, client: AsyncClient, ho_package, venue_package):
        response = await client.get("/api/v1/packages")
        assert response.json()["totalItems"] == 2

        response = await client.get("/api/v1/packages?is_venue_fee=true")
        data = response.json()
        assert data["totalItems"] == 1
        assert data["items"][0]["id"] == venue_package.id

    @pytest.mark.asyncio
    async def test_patch_package(self, client: AsyncClient, ho_package):
        response = await client.patch(
            f"/api/v1/packages/{ho_package.id}", json={"active": False}
        )
        assert response.status_code == 200
        assert response.json()["active"] is False

    @pytest.mark.asyncio
    async def test_patch_to_venue_without_chapter(self, client: AsyncClient, ho_package):
        response = await client.patch(
            f"/api/v1/packages/{ho_package.id}", json={"is_venue_fee": True}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient):
        response = await client.get("/api/v1/packages/doesnotexist123")
        assert response.status_code == 404
