"""
Pydantic schemas for Membership endpoints.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator

from app.schemas.common import BaseResponse, UTCDatetime


class MembershipCreate(BaseModel):
    """Record a package purchase for a member."""
    member_id: str = Field(..., min_length=1)
    package_id: str = Field(..., min_length=1)
    invoice_date: UTCDatetime

    # Defaults to now, or the member's live expiry on the package's track
    package_start_date: Optional[UTCDatetime] = None

    basic_fees: Decimal = Field(..., gt=0, decimal_places=2)
    cgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    sgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    igst_rate: Optional[Decimal] = Field(None, ge=0, le=100)

    # Payment details
    payment_date: Optional[UTCDatetime] = None
    payment_mode: Optional[str] = Field(None, max_length=50)
    payment_reference: Optional[str] = Field(None, max_length=100)
    bank_name: Optional[str] = Field(None, max_length=100)


class MembershipUpdate(BaseModel):
    """
    Update a membership.

    member_id and package_id are not accepted: they drive the member's
    expiry tracks and are fixed at creation.
    """
    invoice_date: Optional[UTCDatetime] = None
    basic_fees: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    cgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    sgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    igst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    payment_date: Optional[UTCDatetime] = None
    payment_mode: Optional[str] = Field(None, max_length=50)
    payment_reference: Optional[str] = Field(None, max_length=100)
    bank_name: Optional[str] = Field(None, max_length=100)
    active: Optional[bool] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_fields(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        for field in ("invoice_date", "basic_fees", "active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class MembershipResponse(BaseResponse):
    """Membership response."""
    member_id: str
    package_id: str
    invoice_number: str
    invoice_date: datetime
    package_start_date: datetime
    package_end_date: datetime
    basic_fees: Decimal
    cgst_rate: Optional[Decimal] = None
    sgst_rate: Optional[Decimal] = None
    igst_rate: Optional[Decimal] = None
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_fees: Decimal
    payment_date: Optional[datetime] = None
    payment_mode: Optional[str] = None
    payment_reference: Optional[str] = None
    bank_name: Optional[str] = None
    active: bool


class MembershipListResponse(BaseModel):
    """Paginated list of memberships."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[MembershipResponse]
