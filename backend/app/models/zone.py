"""
Zone model - a regional grouping of chapters.
"""
from typing import TYPE_CHECKING
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.chapter import Chapter


class Zone(BaseModel):
    __tablename__ = "zones"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    chapters: Mapped[list["Chapter"]] = relationship(
        "Chapter",
        back_populates="zone"
    )

    def __repr__(self) -> str:
        return f"<Zone {self.name}>"
