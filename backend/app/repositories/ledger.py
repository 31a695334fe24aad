"""
Ledger persistence over an AsyncSession.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func

from app.models.chapter import Chapter
from app.models.transaction import Transaction, AccountType, TransactionType
from app.repositories.base import SessionStore


class SqlAlchemyLedgerStore(SessionStore):

    async def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        return await self.session.get(Chapter, chapter_id)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return await self.session.get(Transaction, transaction_id)

    async def sum_amounts(
        self,
        chapter_id: str,
        account_type: str,
        transaction_type: str,
    ) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.chapter_id == chapter_id,
                Transaction.account_type == AccountType(account_type),
                Transaction.transaction_type == TransactionType(transaction_type),
            )
        )
        return Decimal(str(result.scalar_one()))
