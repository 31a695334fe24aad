"""
Membership persistence over an AsyncSession.
"""
from typing import Optional, Sequence

from sqlalchemy import select

from app.models.member import Member
from app.models.membership import Membership
from app.models.package import Package
from app.models.user import User
from app.repositories.base import SessionStore


class SqlAlchemyMembershipStore(SessionStore):

    async def get_member(self, member_id: str) -> Optional[Member]:
        return await self.session.get(Member, member_id)

    async def get_package(self, package_id: str) -> Optional[Package]:
        return await self.session.get(Package, package_id)

    async def get_membership(self, membership_id: str) -> Optional[Membership]:
        return await self.session.get(Membership, membership_id)

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def list_invoice_numbers(self, prefix: str) -> Sequence[str]:
        result = await self.session.execute(
            select(Membership.invoice_number).where(
                Membership.invoice_number.startswith(prefix, autoescape=True)
            )
        )
        return list(result.scalars().all())

    async def latest_active_membership(
        self,
        member_id: str,
        is_venue_fee: bool,
        exclude_id: Optional[str] = None,
    ) -> Optional[Membership]:
        query = (
            select(Membership)
            .join(Package, Package.id == Membership.package_id)
            .where(
                Membership.member_id == member_id,
                Membership.active == True,
                Package.is_venue_fee == is_venue_fee,
            )
        )
        if exclude_id is not None:
            query = query.where(Membership.id != exclude_id)
        query = query.order_by(Membership.package_end_date.desc()).limit(1)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()
