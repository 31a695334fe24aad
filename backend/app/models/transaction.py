"""
Transaction model - one cash or bank ledger entry of a chapter.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Boolean, Numeric, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import UTCDateTime
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.chapter import Chapter


class AccountType(str, Enum):
    """Chapter account a transaction is booked against."""
    CASH = "cash"
    BANK = "bank"


class TransactionType(str, Enum):
    """Direction of a transaction."""
    CREDIT = "credit"
    DEBIT = "debit"


class Transaction(BaseModel):
    __tablename__ = "transactions"

    chapter_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("chapters.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    # Use values_callable to store lowercase values in DB
    account_type: Mapped[AccountType] = mapped_column(
        SQLEnum(
            AccountType,
            name="accounttype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False,
        index=True
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(
            TransactionType,
            name="transactiontype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )

    # Always positive; direction comes from transaction_type
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    transaction_head: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    narration: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transaction_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Supplier invoice metadata
    has_invoice: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    gst_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    gst_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    invoice_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    party_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    party_gst_no: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    party_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    chapter: Mapped["Chapter"] = relationship(
        "Chapter",
        back_populates="transactions"
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.transaction_type.value} {self.amount} ({self.account_type.value})>"
