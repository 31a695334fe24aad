"""
Tests for Membership API endpoints.
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy import select

from app.models.member import Member
from app.models.membership import Membership
from app.models.user import User
from app.services.financial_year import financial_year_end_date


def purchase_payload(member, package, **overrides) -> dict:
    payload = {
        "member_id": member.id,
        "package_id": package.id,
        "invoice_date": "2024-05-10T10:00:00Z",
        "package_start_date": "2024-05-01T00:00:00Z",
        "basic_fees": "25000.00",
        "cgst_rate": "9",
        "sgst_rate": "9",
        "payment_mode": "UPI",
    }
    payload.update(overrides)
    return payload


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestCreateMembership:
    """POST /api/v1/memberships"""

    @pytest.mark.asyncio
    async def test_create_membership(
        self, client: AsyncClient, db_session, test_member, ho_package
    ):
        """Purchase assigns invoice number, dates and tax amounts."""
        response = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        assert response.status_code == 201
        data = response.json()
        assert data["invoice_number"] == "2425-00001"
        assert parse_dt(data["package_end_date"]) == datetime(2025, 3, 30, tzinfo=timezone.utc)
        assert Decimal(data["cgst_amount"]) == Decimal("2250.00")
        assert Decimal(data["sgst_amount"]) == Decimal("2250.00")
        assert Decimal(data["igst_amount"]) == Decimal("0")
        assert Decimal(data["total_fees"]) == Decimal("29500.00")
        assert data["active"] is True

        member = await db_session.get(Member, test_member.id)
        assert member.ho_expiry_date == datetime(2025, 3, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_invoice_numbers_are_sequential(
        self, client: AsyncClient, test_member, ho_package
    ):
        numbers = []
        for _ in range(3):
            response = await client.post(
                "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
            )
            assert response.status_code == 201
            numbers.append(response.json()["invoice_number"])
        assert numbers == ["2425-00001", "2425-00002", "2425-00003"]

    @pytest.mark.asyncio
    async def test_default_start_is_now(
        self, client: AsyncClient, test_member, ho_package
    ):
        payload = purchase_payload(test_member, ho_package)
        del payload["package_start_date"]

        before = datetime.now(timezone.utc)
        response = await client.post("/api/v1/memberships", json=payload)
        assert response.status_code == 201
        data = response.json()

        start = parse_dt(data["package_start_date"])
        assert start >= before
        assert parse_dt(data["package_end_date"]) == financial_year_end_date(start)

    @pytest.mark.asyncio
    async def test_both_tracks_activate_user(
        self, client: AsyncClient, db_session, test_member, test_user, ho_package, venue_package
    ):
        """A live HO and venue membership makes the linked user active."""
        for package in (ho_package, venue_package):
            payload = purchase_payload(test_member, package)
            del payload["package_start_date"]
            response = await client.post("/api/v1/memberships", json=payload)
            assert response.status_code == 201

        user = await db_session.get(User, test_user.id)
        assert user.active is True

    @pytest.mark.asyncio
    async def test_unknown_package(self, client: AsyncClient, test_member):
        response = await client.post(
            "/api/v1/memberships",
            json={
                "member_id": test_member.id,
                "package_id": "doesnotexist123",
                "invoice_date": "2024-05-10T10:00:00Z",
                "basic_fees": "100.00",
            },
        )
        assert response.status_code == 404
        assert "package_id" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_validation_error_is_400(self, client: AsyncClient, test_member, ho_package):
        response = await client.post(
            "/api/v1/memberships",
            json=purchase_payload(test_member, ho_package, basic_fees="-5"),
        )
        assert response.status_code == 400
        data = response.json()
        assert data["detail"] == "Validation failed"
        assert "basic_fees" in data["errors"]

    @pytest.mark.asyncio
    async def test_duplicate_invoice_number_is_conflict(
        self, client: AsyncClient, monkeypatch, test_member, ho_package
    ):
        first = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        assert first.status_code == 201

        async def reuse_number(store, invoice_date):
            return first.json()["invoice_number"]

        monkeypatch.setattr(
            "app.services.membership_lifecycle.generate_invoice_number", reuse_number
        )
        response = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        assert response.status_code == 409
        data = response.json()
        assert data["detail"] == "A record with that invoice_number already exists."
        assert "invoice_number" in data["errors"]

    @pytest.mark.asyncio
    async def test_invoice_date_numbered_in_utc(
        self, client: AsyncClient, test_member, ho_package
    ):
        """00:30 IST on 1 April is still 31 March in UTC."""
        response = await client.post(
            "/api/v1/memberships",
            json=purchase_payload(
                test_member, ho_package, invoice_date="2024-04-01T00:30:00+05:30"
            ),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["invoice_number"] == "2324-00001"
        assert parse_dt(data["invoice_date"]) == datetime(2024, 3, 31, 19, 0, tzinfo=timezone.utc)


class TestMembershipReads:

    @pytest.mark.asyncio
    async def test_list_and_get(self, client: AsyncClient, test_member, ho_package):
        created = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        membership_id = created.json()["id"]

        response = await client.get("/api/v1/memberships")
        assert response.status_code == 200
        data = response.json()
        assert data["totalItems"] == 1
        assert data["items"][0]["id"] == membership_id

        response = await client.get(f"/api/v1/memberships/{membership_id}")
        assert response.status_code == 200
        assert response.json()["invoice_number"] == "2425-00001"

    @pytest.mark.asyncio
    async def test_search_by_invoice_number(self, client: AsyncClient, test_member, ho_package):
        await client.post("/api/v1/memberships", json=purchase_payload(test_member, ho_package))
        await client.post(
            "/api/v1/memberships",
            json=purchase_payload(test_member, ho_package, invoice_date="2024-01-10T10:00:00Z"),
        )

        response = await client.get("/api/v1/memberships?search=2324")
        data = response.json()
        assert data["totalItems"] == 1
        assert data["items"][0]["invoice_number"] == "2324-00001"

    @pytest.mark.asyncio
    async def test_member_memberships(self, client: AsyncClient, test_member, ho_package, venue_package):
        await client.post("/api/v1/memberships", json=purchase_payload(test_member, ho_package))
        await client.post("/api/v1/memberships", json=purchase_payload(test_member, venue_package))

        response = await client.get(f"/api/v1/memberships/member/{test_member.id}")
        assert response.status_code == 200
        assert len(response.json()) == 2

    @pytest.mark.asyncio
    async def test_member_memberships_unknown_member(self, client: AsyncClient):
        response = await client.get("/api/v1/memberships/member/doesnotexist123")
        assert response.status_code == 404
        assert response.json() == {"detail": "Member not found"}

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient):
        response = await client.get("/api/v1/memberships/doesnotexist123")
        assert response.status_code == 404
        assert response.json()["detail"] == "Membership not found"


class TestUpdateMembership:
    """PUT /api/v1/memberships/{id}"""

    @pytest.mark.asyncio
    async def test_update_fees(self, client: AsyncClient, test_member, ho_package):
        created = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        membership_id = created.json()["id"]

        response = await client.put(
            f"/api/v1/memberships/{membership_id}",
            json={"basic_fees": "10000.00", "payment_reference": "UTR998"},
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_fees"]) == Decimal("11800.00")
        assert data["payment_reference"] == "UTR998"
        assert data["invoice_number"] == "2425-00001"

    @pytest.mark.asyncio
    async def test_member_id_cannot_change(self, client: AsyncClient, test_member, ho_package):
        created = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )
        membership_id = created.json()["id"]

        response = await client.put(
            f"/api/v1/memberships/{membership_id}",
            json={"member_id": "someoneelse1234"},
        )
        assert response.status_code == 400
        assert "member_id" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_deactivate_rolls_expiry_back(
        self, client: AsyncClient, db_session, test_member, ho_package
    ):
        first = await client.post(
            "/api/v1/memberships",
            json=purchase_payload(test_member, ho_package, package_start_date="2023-05-01T00:00:00Z"),
        )
        second = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )

        response = await client.put(
            f"/api/v1/memberships/{second.json()['id']}", json={"active": False}
        )
        assert response.status_code == 200
        assert response.json()["active"] is False

        member = await db_session.get(Member, test_member.id)
        assert member.ho_expiry_date == parse_dt(first.json()["package_end_date"])


class TestDeleteMembership:
    """DELETE /api/v1/memberships/{id}"""

    @pytest.mark.asyncio
    async def test_delete_rolls_expiry_back(
        self, client: AsyncClient, db_session, test_member, ho_package
    ):
        first = await client.post(
            "/api/v1/memberships",
            json=purchase_payload(test_member, ho_package, package_start_date="2023-05-01T00:00:00Z"),
        )
        second = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )

        response = await client.delete(f"/api/v1/memberships/{second.json()['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Membership deleted successfully"}

        member = await db_session.get(Member, test_member.id)
        assert member.ho_expiry_date == parse_dt(first.json()["package_end_date"])

        remaining = await db_session.execute(select(Membership.id))
        assert remaining.scalars().all() == [first.json()["id"]]

    @pytest.mark.asyncio
    async def test_delete_only_membership_clears_track(
        self, client: AsyncClient, db_session, test_member, ho_package
    ):
        created = await client.post(
            "/api/v1/memberships", json=purchase_payload(test_member, ho_package)
        )

        await client.delete(f"/api/v1/memberships/{created.json()['id']}")

        member = await db_session.get(Member, test_member.id)
        assert member.ho_expiry_date is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient):
        response = await client.delete("/api/v1/memberships/doesnotexist123")
        assert response.status_code == 404
