"""
Persistence ports used by the membership and ledger services.

Services receive one of these instead of a session so they can run against
SQLAlchemy (app.repositories) or an in-memory fake in unit tests.
"""
from decimal import Decimal
from typing import AsyncContextManager, Optional, Protocol, Sequence

from app.models.chapter import Chapter
from app.models.member import Member
from app.models.membership import Membership
from app.models.package import Package
from app.models.transaction import Transaction
from app.models.user import User


class MembershipStore(Protocol):
    async def get_member(self, member_id: str) -> Optional[Member]: ...

    async def get_package(self, package_id: str) -> Optional[Package]: ...

    async def get_membership(self, membership_id: str) -> Optional[Membership]: ...

    async def get_user(self, user_id: str) -> Optional[User]: ...

    async def list_invoice_numbers(self, prefix: str) -> Sequence[str]: ...

    async def latest_active_membership(
        self,
        member_id: str,
        is_venue_fee: bool,
        exclude_id: Optional[str] = None,
    ) -> Optional[Membership]:
        """Active membership of the same track with the latest end date."""
        ...

    async def add(self, obj) -> None: ...

    async def delete(self, obj) -> None: ...

    async def flush(self) -> None: ...

    def atomic(self) -> AsyncContextManager[None]:
        """All-or-nothing unit of work."""
        ...


class LedgerStore(Protocol):
    async def get_chapter(self, chapter_id: str) -> Optional[Chapter]: ...

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]: ...

    async def sum_amounts(
        self,
        chapter_id: str,
        account_type: str,
        transaction_type: str,
    ) -> Decimal:
        """Sum of amounts for one chapter, account and direction (0 when none)."""
        ...

    async def add(self, obj) -> None: ...

    async def delete(self, obj) -> None: ...

    async def flush(self) -> None: ...

    def atomic(self) -> AsyncContextManager[None]: ...
