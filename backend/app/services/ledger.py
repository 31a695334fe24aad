"""
Chapter ledger service.

Closing balances are never adjusted incrementally: after every mutation they
are recomputed as opening + sum(credits) - sum(debits) over all of the
chapter's transactions on that account. Running the recomputation again
without new transactions yields the same value.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from dateutil.relativedelta import relativedelta

from app.core.config import settings
from app.core.errors import BusinessRuleError, NotFoundError, OperationForbiddenError
from app.models.chapter import Chapter
from app.models.transaction import Transaction, AccountType, TransactionType
from app.schemas.transaction import TransactionCreate
from app.services.ports import LedgerStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


async def get_chapter_or_404(store: LedgerStore, chapter_id: str) -> Chapter:
    chapter = await store.get_chapter(chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter not found")
    return chapter


async def get_transaction_or_404(store: LedgerStore, transaction_id: str) -> Transaction:
    transaction = await store.get_transaction(transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return transaction


async def compute_closing_balance(
    store: LedgerStore,
    chapter: Chapter,
    account_type: AccountType,
) -> Decimal:
    """opening + credits - debits for one account, from the stored transactions."""
    account_type = AccountType(account_type)
    credits = await store.sum_amounts(chapter.id, account_type.value, TransactionType.CREDIT.value)
    debits = await store.sum_amounts(chapter.id, account_type.value, TransactionType.DEBIT.value)
    closing = Decimal(chapter.opening_balance(account_type)) + Decimal(credits) - Decimal(debits)
    return closing.quantize(CENT, rounding=ROUND_HALF_UP)


async def recompute_closing_balances(
    store: LedgerStore,
    chapter: Chapter,
    account_types: Optional[Iterable[AccountType]] = None,
) -> dict[AccountType, Decimal]:
    """Recompute and store closing balances (both accounts by default)."""
    await store.flush()
    balances = {}
    for account_type in account_types or (AccountType.BANK, AccountType.CASH):
        account_type = AccountType(account_type)
        closing = await compute_closing_balance(store, chapter, account_type)
        chapter.set_closing_balance(account_type, closing)
        balances[account_type] = closing
        logger.debug("Chapter %s %s closing balance = %s", chapter.id, account_type.value, closing)
    await store.flush()
    return balances


async def create_transaction(
    store: LedgerStore,
    chapter_id: str,
    data: TransactionCreate,
) -> Transaction:
    """
    Book a transaction.

    A debit is rejected when it would take the chapter's currently stored
    closing balance below zero. This guard exists only at creation.
    """
    chapter = await get_chapter_or_404(store, chapter_id)
    account_type = AccountType(data.account_type)
    transaction_type = TransactionType(data.transaction_type)
    amount = Decimal(data.amount)
    if amount <= 0:
        raise BusinessRuleError("Amount must be positive", errors={"amount": "Amount must be positive"})

    if transaction_type == TransactionType.DEBIT:
        current = Decimal(chapter.closing_balance(account_type))
        if current - amount < 0:
            logger.warning(
                "Rejected %s debit of %s for chapter %s (balance %s)",
                account_type.value, amount, chapter.id, current,
            )
            raise BusinessRuleError(
                f"Transaction would result in a negative {account_type.value} balance",
                errors={"amount": f"Exceeds the {account_type.value} closing balance of {current}"},
            )

    transaction = Transaction(chapter_id=chapter.id, **data.model_dump())
    await store.add(transaction)
    await store.flush()

    await recompute_closing_balances(store, chapter, [account_type])
    logger.info(
        "Transaction %s booked: %s %s %s (chapter %s)",
        transaction.id, account_type.value, transaction_type.value, amount, chapter.id,
    )
    return transaction


def is_locked(transaction: Transaction, now: datetime, window_months: int) -> bool:
    """True when the transaction is dated before the edit window."""
    return transaction.date < now - relativedelta(months=window_months)


async def update_transaction(
    store: LedgerStore,
    transaction_id: str,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
    edit_window_months: Optional[int] = None,
) -> Transaction:
    """
    Edit a transaction and recompute both of the chapter's balances.

    Transactions dated more than the edit window (one calendar month by
    default) before now cannot be edited. No negative balance check here.
    """
    now = now or datetime.now(timezone.utc)
    if edit_window_months is None:
        edit_window_months = settings.TRANSACTION_EDIT_WINDOW_MONTHS

    transaction = await get_transaction_or_404(store, transaction_id)
    if is_locked(transaction, now, edit_window_months):
        raise OperationForbiddenError("Transactions older than a month cannot be edited")

    if not changes:
        raise BusinessRuleError("At least one field is required")
    if "chapter_id" in changes:
        raise BusinessRuleError(
            "Transactions cannot be moved between chapters",
            errors={"chapter_id": "Field cannot be changed"},
        )

    chapter = await get_chapter_or_404(store, transaction.chapter_id)
    async with store.atomic():
        for field, value in changes.items():
            setattr(transaction, field, value)
        await recompute_closing_balances(store, chapter)

    logger.info("Transaction %s updated: %s", transaction.id, sorted(changes))
    return transaction


async def delete_transaction(store: LedgerStore, transaction_id: str) -> None:
    """Delete a transaction and recompute both of the chapter's balances."""
    transaction = await get_transaction_or_404(store, transaction_id)
    chapter = await get_chapter_or_404(store, transaction.chapter_id)

    async with store.atomic():
        await store.delete(transaction)
        await recompute_closing_balances(store, chapter)

    logger.info("Transaction %s deleted (chapter %s)", transaction_id, chapter.id)
