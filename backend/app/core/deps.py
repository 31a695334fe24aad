"""
Dependency injection for API endpoints.
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.base import get_db
from app.repositories import SqlAlchemyLedgerStore, SqlAlchemyMembershipStore
from app.services.invoice_pdf import render_membership_invoice
from app.services.membership_lifecycle import InvoiceRenderer


async def get_membership_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyMembershipStore:
    """Membership store bound to the request session."""
    return SqlAlchemyMembershipStore(db)


async def get_ledger_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyLedgerStore:
    """Ledger store bound to the request session."""
    return SqlAlchemyLedgerStore(db)


def get_invoice_renderer() -> Optional[InvoiceRenderer]:
    """Invoice PDF renderer, or None when invoice documents are switched off."""
    if not settings.INVOICE_PDF_ENABLED:
        return None
    return render_membership_invoice
