"""
Pydantic schemas for Package endpoints.
"""
from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator

from app.schemas.common import BaseResponse


class PackageCreate(BaseModel):
    """Create a package."""
    name: str = Field(..., min_length=1, max_length=255)
    period_months: int = Field(..., ge=1)
    is_venue_fee: bool = False
    chapter_id: Optional[str] = None
    basic_fees: Decimal = Field(..., gt=0, decimal_places=2)
    gst_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    active: bool = True

    @model_validator(mode="after")
    def venue_fee_needs_chapter(self):
        if self.is_venue_fee and not self.chapter_id:
            raise ValueError("Chapter ID is required for venue fee packages")
        return self


class PackageUpdate(BaseModel):
    """Update a package."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    period_months: Optional[int] = Field(None, ge=1)
    is_venue_fee: Optional[bool] = None
    chapter_id: Optional[str] = None
    basic_fees: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    active: Optional[bool] = None


class PackageResponse(BaseResponse):
    """Package response."""
    name: str
    period_months: int
    is_venue_fee: bool
    chapter_id: Optional[str] = None
    basic_fees: Decimal
    gst_rate: Decimal
    active: bool


class PackageListResponse(BaseModel):
    """Paginated list of packages."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[PackageResponse]
