"""
Package model - a purchasable membership plan.
"""
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Boolean, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.chapter import Chapter
    from app.models.membership import Membership


class Package(BaseModel):
    """
    Package reference data.

    is_venue_fee selects which of the member's two expiry tracks a purchase
    moves. period_months is informational: every purchase expires at the end
    of the financial year (see app.services.financial_year.package_end_date).
    """
    __tablename__ = "packages"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    period_months: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    is_venue_fee: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Venue-fee packages belong to a chapter
    chapter_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("chapters.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    basic_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    gst_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    chapter: Mapped[Optional["Chapter"]] = relationship("Chapter")
    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="package"
    )

    def __repr__(self) -> str:
        kind = "venue" if self.is_venue_fee else "HO"
        return f"<Package {self.name} ({kind})>"
