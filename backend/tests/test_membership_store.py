"""
Tests for the SQLAlchemy membership store against SQLite.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from decimal import Decimal

from app.models.member import Member
from app.models.membership import Membership
from app.models.package import Package
from app.repositories import SqlAlchemyMembershipStore
from app.repositories.base import SessionStore
from app.services.membership_lifecycle import delete_membership

END = datetime(2025, 3, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def saved_membership(session_maker) -> Membership:
    """A member whose HO expiry comes from a single committed membership."""
    async with session_maker() as session:
        package = Package(
            name="Annual HO Membership",
            period_months=12,
            is_venue_fee=False,
            basic_fees=Decimal("25000.00"),
            gst_rate=Decimal("18.00"),
        )
        member = Member(name="Asha Rao", ho_expiry_date=END)
        session.add_all([package, member])
        await session.flush()

        membership = Membership(
            member_id=member.id,
            package_id=package.id,
            invoice_number="2425-00001",
            invoice_date=datetime(2024, 5, 10, tzinfo=timezone.utc),
            package_start_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
            package_end_date=END,
            basic_fees=Decimal("25000.00"),
            total_fees=Decimal("25000.00"),
        )
        session.add(membership)
        await session.commit()
        return membership


class TestAtomicDelete:

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_expiry_and_row(
        self, session_maker, saved_membership, monkeypatch
    ):
        async def failing_delete(self, obj):
            raise RuntimeError("disk full")

        monkeypatch.setattr(SessionStore, "delete", failing_delete)

        async with session_maker() as session:
            store = SqlAlchemyMembershipStore(session)
            with pytest.raises(RuntimeError):
                await delete_membership(store, saved_membership.id)
            await session.commit()

        async with session_maker() as session:
            member = await session.get(Member, saved_membership.member_id)
            assert member.ho_expiry_date == END
            assert await session.get(Membership, saved_membership.id) is not None

    @pytest.mark.asyncio
    async def test_delete_commits_both_writes(self, session_maker, saved_membership):
        async with session_maker() as session:
            await delete_membership(SqlAlchemyMembershipStore(session), saved_membership.id)
            await session.commit()

        async with session_maker() as session:
            member = await session.get(Member, saved_membership.member_id)
            assert member.ho_expiry_date is None
            assert await session.get(Membership, saved_membership.id) is None
