"""
Member model.

A member holds two independent membership tracks: head-office (HO) and
venue. Each track's expiry is advanced or rolled back only by the membership
lifecycle service; the member's derived active status is a pure function of
the two expiry dates.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import UTCDateTime
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.chapter import Chapter
    from app.models.user import User
    from app.models.membership import Membership


class Member(BaseModel):
    __tablename__ = "members"

    # Home chapter
    chapter_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("chapters.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Linked login account (at most one)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True
    )

    # Member identity
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    organization_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Membership tracks
    ho_expiry_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    venue_expiry_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Relationships
    chapter: Mapped[Optional["Chapter"]] = relationship(
        "Chapter",
        back_populates="members"
    )
    user: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[user_id],
        back_populates="member"
    )
    # Deleting a member removes its purchase history as one aggregate
    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="member",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Member {self.name}>"
