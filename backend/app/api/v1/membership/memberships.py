"""
Membership (package purchase) endpoints.

Write paths go through app.services.membership_lifecycle, which owns invoice
numbering, expiry track updates and the linked user's active flag.
"""
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.db.base import get_db
from app.core.deps import get_membership_store, get_invoice_renderer
from app.models.member import Member
from app.models.membership import Membership
from app.repositories import SqlAlchemyMembershipStore
from app.schemas.common import MessageResponse
from app.schemas.membership import (
    MembershipCreate, MembershipUpdate, MembershipResponse, MembershipListResponse
)
from app.services.membership_lifecycle import (
    InvoiceRenderer,
    create_membership as create_membership_record,
    update_membership as update_membership_record,
    delete_membership as delete_membership_record,
    get_membership_or_404,
)

router = APIRouter()


def membership_to_response(membership: Membership) -> MembershipResponse:
    """Convert Membership model to MembershipResponse schema."""
    return MembershipResponse.model_validate(membership)


@router.get("", response_model=MembershipListResponse)
async def list_memberships(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    member_id: Optional[str] = None,
    package_id: Optional[str] = None,
    active: Optional[bool] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List memberships, newest invoice first."""
    query = select(Membership)

    if member_id:
        query = query.where(Membership.member_id == member_id)
    if package_id:
        query = query.where(Membership.package_id == package_id)
    if active is not None:
        query = query.where(Membership.active == active)
    if search:
        query = query.where(Membership.invoice_number.ilike(f"%{search}%"))

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    query = query.order_by(Membership.invoice_date.desc(), Membership.invoice_number.desc())
    query = query.offset((page - 1) * perPage).limit(perPage)

    result = await db.execute(query)
    memberships = result.scalars().all()

    return MembershipListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[membership_to_response(m) for m in memberships]
    )


@router.post("", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
async def create_membership(
    membership_data: MembershipCreate,
    store: SqlAlchemyMembershipStore = Depends(get_membership_store),
    invoice_renderer: Optional[InvoiceRenderer] = Depends(get_invoice_renderer),
):
    """
    Record a package purchase.

    The invoice number, package dates and tax amounts are computed server side.
    """
    membership = await create_membership_record(
        store, membership_data, invoice_renderer=invoice_renderer
    )
    return membership_to_response(membership)


@router.get("/member/{member_id}", response_model=list[MembershipResponse])
async def list_member_memberships(
    member_id: str,
    db: AsyncSession = Depends(get_db),
):
    """All memberships of one member, latest expiry first."""
    member = await db.get(Member, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )

    result = await db.execute(
        select(Membership)
        .where(Membership.member_id == member_id)
        .order_by(Membership.package_end_date.desc())
    )
    return [membership_to_response(m) for m in result.scalars().all()]


@router.get("/{membership_id}", response_model=MembershipResponse)
async def get_membership(
    membership_id: str,
    store: SqlAlchemyMembershipStore = Depends(get_membership_store),
):
    """Get a membership by ID."""
    membership = await get_membership_or_404(store, membership_id)
    return membership_to_response(membership)


@router.put("/{membership_id}", response_model=MembershipResponse)
async def update_membership(
    membership_id: str,
    membership_data: MembershipUpdate,
    store: SqlAlchemyMembershipStore = Depends(get_membership_store),
):
    """
    Update a membership.

    Changing `active` moves the member's expiry on the package's track.
    """
    changes = membership_data.model_dump(exclude_unset=True)
    membership = await update_membership_record(store, membership_id, changes)
    return membership_to_response(membership)


@router.delete("/{membership_id}", response_model=MessageResponse)
async def delete_membership(
    membership_id: str,
    store: SqlAlchemyMembershipStore = Depends(get_membership_store),
):
    """Delete a membership, rolling the member's expiry back if it defined it."""
    await delete_membership_record(store, membership_id)
    return MessageResponse(message="Membership deleted successfully")
