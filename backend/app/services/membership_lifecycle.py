"""
Membership lifecycle service.

Provides business logic for:
- Package start/end date resolution (renewals extend from a live expiry)
- GST breakdown and total fees
- Member expiry track updates on create, activation changes and delete
- Keeping the linked user's active flag in step (awaited)
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Awaitable, Callable, Optional

from app.core.errors import BusinessRuleError, NotFoundError
from app.models.member import Member
from app.models.membership import Membership
from app.models.package import Package
from app.schemas.membership import MembershipCreate
from app.services.financial_year import package_end_date
from app.services.invoice_numbering import generate_invoice_number
from app.services.member_activation import sync_user_active_status
from app.services.ports import MembershipStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

FEE_FIELDS = ("basic_fees", "cgst_rate", "sgst_rate", "igst_rate")

# Fields a PUT may touch. member_id / package_id drive the expiry tracks and
# invoice_number is system assigned, so none of them can change.
UPDATABLE_FIELDS = frozenset(FEE_FIELDS) | {
    "invoice_date",
    "payment_date",
    "payment_mode",
    "payment_reference",
    "bank_name",
    "active",
}
IMMUTABLE_FIELDS = frozenset({"member_id", "package_id", "invoice_number"})

InvoiceRenderer = Callable[[Membership, Member, Package], Awaitable[Any]]


@dataclass
class FeeBreakdown:
    basic_fees: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_fees: Decimal


def _tax_amount(basic_fees: Decimal, rate: Optional[Decimal]) -> Decimal:
    if not rate:
        return Decimal("0.00")
    return (basic_fees * Decimal(rate) / 100).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_fee_breakdown(
    basic_fees: Decimal,
    cgst_rate: Optional[Decimal] = None,
    sgst_rate: Optional[Decimal] = None,
    igst_rate: Optional[Decimal] = None,
) -> FeeBreakdown:
    """Tax amounts are rounded to the cent, total is their exact sum with the base fee."""
    basic_fees = Decimal(basic_fees)
    if basic_fees <= 0:
        raise BusinessRuleError(
            "Basic fees must be positive",
            errors={"basic_fees": "Basic fees must be positive"},
        )
    for name, rate in (("cgst_rate", cgst_rate), ("sgst_rate", sgst_rate), ("igst_rate", igst_rate)):
        if rate is not None and Decimal(rate) < 0:
            raise BusinessRuleError(
                f"{name} cannot be negative",
                errors={name: "Rate cannot be negative"},
            )

    cgst_amount = _tax_amount(basic_fees, cgst_rate)
    sgst_amount = _tax_amount(basic_fees, sgst_rate)
    igst_amount = _tax_amount(basic_fees, igst_rate)
    return FeeBreakdown(
        basic_fees=basic_fees,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        total_fees=basic_fees + cgst_amount + sgst_amount + igst_amount,
    )


def expiry_field_for(package: Package) -> str:
    """Member attribute holding the expiry of the track this package feeds."""
    return "venue_expiry_date" if package.is_venue_fee else "ho_expiry_date"


def resolve_package_start_date(
    member: Member,
    package: Package,
    requested: Optional[datetime],
    now: datetime,
) -> datetime:
    """
    Explicit start date wins. Otherwise start now, or at the member's current
    expiry on the same track when that expiry is still in the future.
    """
    if requested is not None:
        return requested
    current_expiry = getattr(member, expiry_field_for(package))
    if current_expiry is not None and current_expiry > now:
        return current_expiry
    return now


async def _load_member(store: MembershipStore, member_id: str) -> Member:
    member = await store.get_member(member_id)
    if member is None:
        raise NotFoundError("Member not found", errors={"member_id": "Member not found"})
    return member


async def _load_package(store: MembershipStore, package_id: str) -> Package:
    package = await store.get_package(package_id)
    if package is None:
        raise NotFoundError("Package not found", errors={"package_id": "Package not found"})
    return package


async def get_membership_or_404(store: MembershipStore, membership_id: str) -> Membership:
    membership = await store.get_membership(membership_id)
    if membership is None:
        raise NotFoundError("Membership not found")
    return membership


async def _roll_back_expiry(
    store: MembershipStore,
    member: Member,
    package: Package,
    membership: Membership,
) -> None:
    """
    If `membership` currently defines the member's expiry on its track, fall
    back to the latest other active membership on that track, or None.
    """
    field = expiry_field_for(package)
    current = getattr(member, field)
    if current is None or current != membership.package_end_date:
        return

    fallback = await store.latest_active_membership(
        member.id, package.is_venue_fee, exclude_id=membership.id
    )
    new_expiry = fallback.package_end_date if fallback is not None else None
    setattr(member, field, new_expiry)
    logger.info("Member %s %s rolled back %s -> %s", member.id, field, current, new_expiry)


async def create_membership(
    store: MembershipStore,
    data: MembershipCreate,
    now: Optional[datetime] = None,
    invoice_renderer: Optional[InvoiceRenderer] = None,
) -> Membership:
    """
    Record a package purchase.

    Assigns the next invoice number, snaps the end date to the financial year
    boundary, advances the member's expiry on the package's track and syncs
    the linked user's active flag. A failing invoice_renderer is logged and
    does not undo the purchase.
    """
    now = now or datetime.now(timezone.utc)
    member = await _load_member(store, data.member_id)
    package = await _load_package(store, data.package_id)

    start_date = resolve_package_start_date(member, package, data.package_start_date, now)
    end_date = package_end_date(start_date, package)
    fees = compute_fee_breakdown(data.basic_fees, data.cgst_rate, data.sgst_rate, data.igst_rate)
    invoice_number = await generate_invoice_number(store, data.invoice_date)

    membership = Membership(
        member_id=member.id,
        package_id=package.id,
        invoice_number=invoice_number,
        invoice_date=data.invoice_date,
        package_start_date=start_date,
        package_end_date=end_date,
        basic_fees=fees.basic_fees,
        cgst_rate=data.cgst_rate,
        sgst_rate=data.sgst_rate,
        igst_rate=data.igst_rate,
        cgst_amount=fees.cgst_amount,
        sgst_amount=fees.sgst_amount,
        igst_amount=fees.igst_amount,
        total_fees=fees.total_fees,
        payment_date=data.payment_date,
        payment_mode=data.payment_mode,
        payment_reference=data.payment_reference,
        bank_name=data.bank_name,
        active=True,
    )
    await store.add(membership)
    # Surface an invoice number collision here rather than at commit
    await store.flush()

    # A new purchase always moves its track, even backwards
    setattr(member, expiry_field_for(package), end_date)
    await store.flush()
    logger.info(
        "Membership %s created for member %s, %s now %s",
        invoice_number, member.id, expiry_field_for(package), end_date,
    )

    await sync_user_active_status(store, member.id, now)

    if invoice_renderer is not None:
        try:
            await invoice_renderer(membership, member, package)
        except Exception:
            logger.exception("Invoice document for %s could not be rendered", invoice_number)

    return membership


async def update_membership(
    store: MembershipStore,
    membership_id: str,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> Membership:
    """
    Apply a partial update.

    Fee changes recompute the tax amounts from the merged values. Toggling
    `active` moves the member's expiry on the package's track:
    - deactivating the membership that defines the expiry falls back to the
      latest other active membership (or None);
    - activating a membership that ends later than the expiry advances it.
    """
    now = now or datetime.now(timezone.utc)
    if not changes:
        raise BusinessRuleError("At least one field is required")

    immutable = IMMUTABLE_FIELDS.intersection(changes)
    if immutable:
        raise BusinessRuleError(
            "Field cannot be changed after creation",
            errors={field: "Field cannot be changed after creation" for field in sorted(immutable)},
        )
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise BusinessRuleError(
            "Unknown fields",
            errors={field: "Unknown field" for field in sorted(unknown)},
        )

    membership = await get_membership_or_404(store, membership_id)
    member = await _load_member(store, membership.member_id)
    package = await _load_package(store, membership.package_id)

    fees = merged = None
    if any(field in changes for field in FEE_FIELDS):
        merged = {field: changes.get(field, getattr(membership, field)) for field in FEE_FIELDS}
        fees = compute_fee_breakdown(**merged)

    async with store.atomic():
        if fees is not None:
            membership.basic_fees = fees.basic_fees
            membership.cgst_rate = merged["cgst_rate"]
            membership.sgst_rate = merged["sgst_rate"]
            membership.igst_rate = merged["igst_rate"]
            membership.cgst_amount = fees.cgst_amount
            membership.sgst_amount = fees.sgst_amount
            membership.igst_amount = fees.igst_amount
            membership.total_fees = fees.total_fees

        for field in ("invoice_date", "payment_date", "payment_mode", "payment_reference", "bank_name"):
            if field in changes:
                setattr(membership, field, changes[field])

        if "active" in changes and changes["active"] is not None and changes["active"] != membership.active:
            field = expiry_field_for(package)
            if changes["active"]:
                current = getattr(member, field)
                if current is None or membership.package_end_date > current:
                    setattr(member, field, membership.package_end_date)
                    logger.info("Member %s %s advanced to %s", member.id, field, membership.package_end_date)
            else:
                await _roll_back_expiry(store, member, package, membership)
            membership.active = changes["active"]

    logger.info("Membership %s updated: %s", membership.invoice_number, sorted(changes))
    await sync_user_active_status(store, member.id, now)
    return membership


async def delete_membership(
    store: MembershipStore,
    membership_id: str,
    now: Optional[datetime] = None,
) -> None:
    """
    Delete a membership, first rolling the member's expiry back if this
    membership defined it. Both writes happen in one atomic unit.
    """
    now = now or datetime.now(timezone.utc)
    membership = await get_membership_or_404(store, membership_id)
    member = await _load_member(store, membership.member_id)
    package = await _load_package(store, membership.package_id)
    invoice_number = membership.invoice_number

    async with store.atomic():
        await _roll_back_expiry(store, member, package, membership)
        await store.delete(membership)

    logger.info("Membership %s deleted (member %s)", invoice_number, member.id)
    await sync_user_active_status(store, member.id, now)
