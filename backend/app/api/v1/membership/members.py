"""
Member endpoints.

Members are read here with their derived active status. Reads schedule a
best-effort background refresh of the linked user's active flag when it has
drifted from the expiry tracks (for instance after an expiry date passed).
"""
from typing import Optional
from math import ceil
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, func

from app.db.base import get_db, get_session_maker
from app.models.member import Member
from app.models.membership import Membership
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.member import MemberResponse, MemberListResponse, MembershipStatusResponse
from app.services.member_activation import (
    derive_active_status,
    describe_membership_status,
    refresh_user_active_status_in_background,
)

router = APIRouter()


def member_to_response(member: Member, is_active: bool) -> MemberResponse:
    """Convert Member model to MemberResponse schema."""
    return MemberResponse(
        id=member.id,
        chapter_id=member.chapter_id,
        user_id=member.user_id,
        name=member.name,
        email=member.email,
        mobile=member.mobile,
        organization_name=member.organization_name,
        ho_expiry_date=member.ho_expiry_date,
        venue_expiry_date=member.venue_expiry_date,
        is_active=is_active,
        created=member.created,
        updated=member.updated,
    )


def schedule_refresh_if_stale(
    background_tasks: BackgroundTasks,
    session_maker: async_sessionmaker,
    member: Member,
    is_active: bool,
    user_active: Optional[bool],
) -> None:
    if user_active is not None and user_active != is_active:
        background_tasks.add_task(refresh_user_active_status_in_background, session_maker, member.id)


async def get_member_or_404(db: AsyncSession, member_id: str) -> Member:
    member = await db.get(Member, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )
    return member


async def get_user_active(db: AsyncSession, member: Member) -> Optional[bool]:
    if member.user_id is None:
        return None
    user = await db.get(User, member.user_id)
    return user.active if user is not None else None


@router.get("", response_model=MemberListResponse)
async def list_members(
    background_tasks: BackgroundTasks,
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    chapter_id: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    session_maker: async_sessionmaker = Depends(get_session_maker),
):
    """List members with their derived active status."""
    query = select(Member, User.active).outerjoin(User, User.id == Member.user_id)

    if chapter_id:
        query = query.where(Member.chapter_id == chapter_id)
    if search:
        query = query.where(
            Member.name.ilike(f"%{search}%") |
            Member.email.ilike(f"%{search}%")
        )

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    query = query.order_by(Member.name.asc())
    query = query.offset((page - 1) * perPage).limit(perPage)

    result = await db.execute(query)

    items = []
    for member, user_active in result.all():
        is_active = derive_active_status(member)
        schedule_refresh_if_stale(background_tasks, session_maker, member, is_active, user_active)
        items.append(member_to_response(member, is_active))

    return MemberListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=items
    )


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_maker: async_sessionmaker = Depends(get_session_maker),
):
    """Get a member by ID."""
    member = await get_member_or_404(db, member_id)
    is_active = derive_active_status(member)
    user_active = await get_user_active(db, member)
    schedule_refresh_if_stale(background_tasks, session_maker, member, is_active, user_active)
    return member_to_response(member, is_active)


@router.get("/{member_id}/membership-status", response_model=MembershipStatusResponse)
async def get_membership_status(
    member_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_maker: async_sessionmaker = Depends(get_session_maker),
):
    """
    Expiry status of both tracks.

    The earlier of the two expiry dates is reported as expiry_date, with
    expiry_type naming its track.
    """
    member = await get_member_or_404(db, member_id)
    membership_status = describe_membership_status(member)
    user_active = await get_user_active(db, member)
    schedule_refresh_if_stale(
        background_tasks, session_maker, member, membership_status.is_active, user_active
    )

    active_count = await db.execute(
        select(func.count()).select_from(Membership).where(
            Membership.member_id == member.id,
            Membership.active == True
        )
    )

    return MembershipStatusResponse(
        member_id=member.id,
        name=member.name,
        active=membership_status.is_active,
        user_active=user_active,
        has_active_memberships=(active_count.scalar() or 0) > 0,
        ho_expiry_date=membership_status.ho_expiry_date,
        venue_expiry_date=membership_status.venue_expiry_date,
        ho_expired=membership_status.ho_expired,
        venue_expired=membership_status.venue_expired,
        expiry_date=membership_status.expiry_date,
        expiry_type=membership_status.expiry_type,
        days_until_expiry=membership_status.days_until_expiry,
    )


@router.delete("/{member_id}", response_model=MessageResponse)
async def delete_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a member together with all of its memberships."""
    member = await get_member_or_404(db, member_id)
    await db.delete(member)
    await db.flush()
    return MessageResponse(message="Member deleted successfully")
