"""
Chapter model.

Only the fields the membership and ledger modules rely on are mapped here.
The four balance columns are owned by the ledger: closing balances are always
recomputed from the opening balance and the chapter's transactions.
"""
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.zone import Zone
    from app.models.member import Member
    from app.models.transaction import Transaction


class Chapter(BaseModel):
    __tablename__ = "chapters"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    zone_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("zones.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Running balances
    bank_opening_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    bank_closing_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    cash_opening_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    cash_closing_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

    # Relationships
    zone: Mapped[Optional["Zone"]] = relationship(
        "Zone",
        back_populates="chapters"
    )
    members: Mapped[list["Member"]] = relationship(
        "Member",
        back_populates="chapter"
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="chapter",
        cascade="all, delete-orphan"
    )

    def opening_balance(self, account_type) -> Decimal:
        key = getattr(account_type, "value", account_type)
        return getattr(self, f"{key}_opening_balance") or Decimal("0")

    def closing_balance(self, account_type) -> Decimal:
        key = getattr(account_type, "value", account_type)
        return getattr(self, f"{key}_closing_balance") or Decimal("0")

    def set_closing_balance(self, account_type, value: Decimal) -> None:
        key = getattr(account_type, "value", account_type)
        setattr(self, f"{key}_closing_balance", value)

    def __repr__(self) -> str:
        return f"<Chapter {self.name}>"
