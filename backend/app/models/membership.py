"""
Membership model - one package purchase by one member.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import UTCDateTime
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.package import Package


class Membership(BaseModel):
    """
    Membership (invoice) record.

    total_fees is always basic_fees plus the three tax amounts.
    member_id and package_id never change after creation because the
    member's expiry tracks are derived from them.
    """
    __tablename__ = "memberships"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    package_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("packages.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Invoice
    invoice_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    invoice_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    # Validity
    package_start_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    package_end_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    # Fees
    basic_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cgst_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    sgst_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    igst_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    cgst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    sgst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    igst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Payment
    payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    payment_mode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    member: Mapped["Member"] = relationship(
        "Member",
        back_populates="memberships"
    )
    package: Mapped["Package"] = relationship(
        "Package",
        back_populates="memberships"
    )

    def __repr__(self) -> str:
        return f"<Membership {self.invoice_number}>"
