"""
Member activation policy.

A member is active only when BOTH expiry tracks are set and AT LEAST ONE of
them is still in the future. A member with a future HO expiry but no venue
expiry is inactive. The linked user account's `active` flag mirrors this.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from math import ceil
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.models.member import Member
from app.repositories.membership import SqlAlchemyMembershipStore
from app.services.ports import MembershipStore

logger = logging.getLogger(__name__)

TRACK_HO = "HO"
TRACK_VENUE = "Venue"


def derive_active_status(member: Member, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    ho = member.ho_expiry_date
    venue = member.venue_expiry_date
    if ho is None or venue is None:
        return False
    return ho > now or venue > now


@dataclass
class MembershipStatus:
    """Read model for a member's two expiry tracks."""
    is_active: bool
    ho_expiry_date: Optional[datetime]
    venue_expiry_date: Optional[datetime]
    ho_expired: bool
    venue_expired: bool
    expiry_date: Optional[datetime] = None
    expiry_type: Optional[str] = None
    days_until_expiry: Optional[int] = None


def describe_membership_status(member: Member, now: Optional[datetime] = None) -> MembershipStatus:
    """Summarise both tracks; the earlier expiry is the one reported."""
    now = now or datetime.now(timezone.utc)
    ho = member.ho_expiry_date
    venue = member.venue_expiry_date

    expiry_date = None
    expiry_type = None
    if ho is not None and venue is not None:
        if ho < venue:
            expiry_date, expiry_type = ho, TRACK_HO
        else:
            expiry_date, expiry_type = venue, TRACK_VENUE
    elif ho is not None:
        expiry_date, expiry_type = ho, TRACK_HO
    elif venue is not None:
        expiry_date, expiry_type = venue, TRACK_VENUE

    days_until_expiry = None
    if expiry_date is not None:
        days_until_expiry = ceil((expiry_date - now).total_seconds() / 86400)

    return MembershipStatus(
        is_active=derive_active_status(member, now),
        ho_expiry_date=ho,
        venue_expiry_date=venue,
        ho_expired=ho is None or ho <= now,
        venue_expired=venue is None or venue <= now,
        expiry_date=expiry_date,
        expiry_type=expiry_type,
        days_until_expiry=days_until_expiry,
    )


async def sync_user_active_status(
    store: MembershipStore,
    member_id: str,
    now: Optional[datetime] = None,
) -> Optional[bool]:
    """
    Align the linked user's active flag with the member's expiry tracks.

    Returns the derived status, or None when there is no linked user.
    Write paths await this before responding.
    """
    member = await store.get_member(member_id)
    if member is None or member.user_id is None:
        logger.info("No user linked to member %s, skipping status sync", member_id)
        return None

    user = await store.get_user(member.user_id)
    if user is None:
        logger.info("Linked user %s of member %s not found", member.user_id, member_id)
        return None

    active = derive_active_status(member, now)
    if user.active != active:
        logger.info("Setting user %s active=%s (member %s)", user.id, active, member_id)
        user.active = active
        await store.flush()
    return active


async def refresh_user_active_status_in_background(
    session_maker: async_sessionmaker,
    member_id: str,
) -> None:
    """
    Best-effort status sync for read paths, run as a background task.

    Uses its own session; failures are logged and never reach the client.
    """
    try:
        async with session_maker() as session:
            await sync_user_active_status(SqlAlchemyMembershipStore(session), member_id)
            await session.commit()
    except Exception:
        logger.exception("Background status refresh failed for member %s", member_id)
