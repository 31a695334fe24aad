"""
Chapter ledger endpoints.

Every write recomputes the chapter's closing balances from the full
transaction history (see app.services.ledger).
"""
from datetime import datetime
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.db.base import get_db
from app.core.deps import get_ledger_store
from app.models.chapter import Chapter
from app.models.transaction import Transaction, AccountType, TransactionType
from app.repositories import SqlAlchemyLedgerStore
from app.schemas.common import MessageResponse, as_utc
from app.schemas.transaction import (
    TransactionCreate, TransactionUpdate, TransactionResponse,
    TransactionListResponse, ChapterBalances,
)
from app.services.ledger import (
    create_transaction as create_ledger_transaction,
    update_transaction as update_ledger_transaction,
    delete_transaction as delete_ledger_transaction,
    recompute_closing_balances,
    get_chapter_or_404,
    get_transaction_or_404,
)

router = APIRouter()


def transaction_to_response(transaction: Transaction) -> TransactionResponse:
    """Convert Transaction model to TransactionResponse schema."""
    return TransactionResponse.model_validate(transaction)


def chapter_balances(chapter: Chapter) -> ChapterBalances:
    return ChapterBalances(
        chapter_id=chapter.id,
        bank_opening_balance=chapter.bank_opening_balance,
        bank_closing_balance=chapter.bank_closing_balance,
        cash_opening_balance=chapter.cash_opening_balance,
        cash_closing_balance=chapter.cash_closing_balance,
    )


@router.get("/chapters/{chapter_id}/transactions", response_model=TransactionListResponse)
async def list_transactions(
    chapter_id: str,
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    account_type: Optional[AccountType] = None,
    transaction_type: Optional[TransactionType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """List a chapter's transactions, most recent first, with its balances."""
    chapter = await get_chapter_or_404(store, chapter_id)

    query = select(Transaction).where(Transaction.chapter_id == chapter.id)

    if account_type:
        query = query.where(Transaction.account_type == account_type)
    if transaction_type:
        query = query.where(Transaction.transaction_type == transaction_type)
    if start_date:
        query = query.where(Transaction.date >= as_utc(start_date))
    if end_date:
        query = query.where(Transaction.date <= as_utc(end_date))
    if search:
        query = query.where(
            or_(
                Transaction.transaction_head.ilike(f"%{search}%"),
                Transaction.narration.ilike(f"%{search}%"),
                Transaction.description.ilike(f"%{search}%"),
                Transaction.party_name.ilike(f"%{search}%"),
                Transaction.reference.ilike(f"%{search}%"),
            )
        )

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    query = query.order_by(Transaction.date.desc(), Transaction.created.desc())
    query = query.offset((page - 1) * perPage).limit(perPage)

    result = await db.execute(query)
    transactions = result.scalars().all()

    return TransactionListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[transaction_to_response(t) for t in transactions],
        balances=chapter_balances(chapter),
    )


@router.post(
    "/chapters/{chapter_id}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    chapter_id: str,
    transaction_data: TransactionCreate,
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """
    Book a transaction.

    Debits that would take the account's closing balance below zero are
    rejected with 400.
    """
    transaction = await create_ledger_transaction(store, chapter_id, transaction_data)
    return transaction_to_response(transaction)


@router.post("/chapters/{chapter_id}/balances/recompute", response_model=ChapterBalances)
async def recompute_balances(
    chapter_id: str,
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """Recompute both closing balances from the opening balances and all transactions."""
    chapter = await get_chapter_or_404(store, chapter_id)
    await recompute_closing_balances(store, chapter)
    return chapter_balances(chapter)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """Get a transaction by ID."""
    transaction = await get_transaction_or_404(store, transaction_id)
    return transaction_to_response(transaction)


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: str,
    transaction_data: TransactionUpdate,
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """
    Update a transaction.

    Transactions dated more than a month ago are locked (403).
    """
    changes = transaction_data.model_dump(exclude_unset=True)
    transaction = await update_ledger_transaction(store, transaction_id, changes)
    return transaction_to_response(transaction)


@router.delete("/transactions/{transaction_id}", response_model=MessageResponse)
async def delete_transaction(
    transaction_id: str,
    store: SqlAlchemyLedgerStore = Depends(get_ledger_store),
):
    """Delete a transaction and recompute the chapter's balances."""
    await delete_ledger_transaction(store, transaction_id)
    return MessageResponse(message="Transaction deleted successfully")
