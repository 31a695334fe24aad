"""
Membership API routers.

Provides endpoints for:
- Memberships (package purchases and their invoices)
- Members (derived active status, expiry status)
- Packages
"""
from fastapi import APIRouter

from app.api.v1.membership.memberships import router as memberships_router
from app.api.v1.membership.members import router as members_router
from app.api.v1.membership.packages import router as packages_router

# Combined membership router
membership_router = APIRouter(tags=["membership"])

membership_router.include_router(
    memberships_router,
    prefix="/memberships",
    tags=["memberships"]
)

membership_router.include_router(
    members_router,
    prefix="/members",
    tags=["members"]
)

membership_router.include_router(
    packages_router,
    prefix="/packages",
    tags=["packages"]
)

__all__ = ["membership_router"]
