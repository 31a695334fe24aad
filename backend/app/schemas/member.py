"""
Pydantic schemas for Member endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel

from app.schemas.common import BaseResponse


class MemberResponse(BaseResponse):
    """Member with its derived active status."""
    chapter_id: Optional[str] = None
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    organization_name: Optional[str] = None
    ho_expiry_date: Optional[datetime] = None
    venue_expiry_date: Optional[datetime] = None
    is_active: bool = False


class MemberListResponse(BaseModel):
    """Paginated list of members."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[MemberResponse]


class MembershipStatusResponse(BaseModel):
    """Expiry status of a member's HO and venue tracks."""
    member_id: str
    name: str
    active: bool
    user_active: Optional[bool] = None
    has_active_memberships: bool
    ho_expiry_date: Optional[datetime] = None
    venue_expiry_date: Optional[datetime] = None
    ho_expired: bool
    venue_expired: bool
    expiry_date: Optional[datetime] = None
    expiry_type: Optional[str] = None
    days_until_expiry: Optional[int] = None
