"""
User model.
"""
from typing import Optional, TYPE_CHECKING
from enum import Enum
from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.member import Member


class UserRole(str, Enum):
    """System-level role of a login account."""
    ADMIN = "admin"
    MEMBER = "member"


class User(BaseModel):
    """Login account, optionally linked to one member record."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="userrole",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=UserRole.MEMBER,
        nullable=False
    )

    # Kept in sync with the linked member's expiry tracks
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    member: Mapped[Optional["Member"]] = relationship(
        "Member",
        foreign_keys="Member.user_id",
        back_populates="user",
        uselist=False
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
