"""
Membership invoice documents.

One A4 page drawn with the reportlab canvas: issuer, bill-to, the package
line, the GST lines that apply and the total.
"""
import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.models.member import Member
from app.models.membership import Membership
from app.models.package import Package

logger = logging.getLogger(__name__)

NAVY = HexColor("#1B2A4A")
SLATE = HexColor("#64748B")
RULE = HexColor("#E2E8F0")

W, H = A4
MARGIN = 45
CONTENT_W = W - 2 * MARGIN


@dataclass
class InvoiceDocument:
    invoice_number: str
    invoice_date: datetime
    issuer_name: str
    member_name: str
    package_name: str
    package_start_date: datetime
    package_end_date: datetime
    basic_fees: Decimal
    total_fees: Decimal
    issuer_gstin: Optional[str] = None
    member_email: Optional[str] = None
    organization_name: Optional[str] = None
    # (label, rate, amount) for each tax actually charged
    tax_lines: list[tuple[str, Decimal, Decimal]] = field(default_factory=list)
    payment_mode: Optional[str] = None
    payment_reference: Optional[str] = None

    @classmethod
    def from_membership(cls, membership: Membership, member: Member, package: Package) -> "InvoiceDocument":
        tax_lines = []
        for label, rate, amount in (
            ("CGST", membership.cgst_rate, membership.cgst_amount),
            ("SGST", membership.sgst_rate, membership.sgst_amount),
            ("IGST", membership.igst_rate, membership.igst_amount),
        ):
            if rate:
                tax_lines.append((label, Decimal(rate), Decimal(amount)))

        return cls(
            invoice_number=membership.invoice_number,
            invoice_date=membership.invoice_date,
            issuer_name=settings.INVOICE_ISSUER_NAME,
            issuer_gstin=settings.INVOICE_ISSUER_GSTIN,
            member_name=member.name,
            member_email=member.email,
            organization_name=member.organization_name,
            package_name=package.name,
            package_start_date=membership.package_start_date,
            package_end_date=membership.package_end_date,
            basic_fees=Decimal(membership.basic_fees),
            total_fees=Decimal(membership.total_fees),
            tax_lines=tax_lines,
            payment_mode=membership.payment_mode,
            payment_reference=membership.payment_reference,
        )


def invoice_pdf_path(invoice_number: str) -> str:
    return os.path.join(settings.INVOICE_DIR, f"{invoice_number}.pdf")


def _money(value: Decimal) -> str:
    return f"{Decimal(value):,.2f}"


def _day(value: datetime) -> str:
    return value.strftime("%d %b %Y")


def render_invoice_pdf(document: InvoiceDocument, path: str) -> str:
    """Draw the invoice to `path` (parent directories are created). Returns the path."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    c = canvas.Canvas(path, pagesize=A4)
    c.setTitle(f"Invoice {document.invoice_number}")
    c.setAuthor(document.issuer_name)

    y = H - MARGIN

    # Header
    c.setFillColor(NAVY)
    c.setFont("Helvetica-Bold", 20)
    c.drawString(MARGIN, y - 20, document.issuer_name)
    c.setFont("Helvetica-Bold", 14)
    c.drawRightString(W - MARGIN, y - 18, "TAX INVOICE")
    y -= 38
    c.setFillColor(SLATE)
    c.setFont("Helvetica", 9)
    if document.issuer_gstin:
        c.drawString(MARGIN, y, f"GSTIN: {document.issuer_gstin}")
    c.drawRightString(W - MARGIN, y, f"Invoice No: {document.invoice_number}")
    y -= 13
    c.drawRightString(W - MARGIN, y, f"Date: {_day(document.invoice_date)}")
    y -= 20
    c.setStrokeColor(RULE)
    c.line(MARGIN, y, W - MARGIN, y)
    y -= 24

    # Bill to
    c.setFillColor(NAVY)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Bill To")
    y -= 15
    c.setFont("Helvetica", 10)
    for line in (document.member_name, document.organization_name, document.member_email):
        if line:
            c.drawString(MARGIN, y, line)
            y -= 13
    y -= 16

    # Line items
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Description")
    c.drawRightString(W - MARGIN, y, "Amount")
    y -= 8
    c.line(MARGIN, y, W - MARGIN, y)
    y -= 16
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN, y, document.package_name)
    c.drawRightString(W - MARGIN, y, _money(document.basic_fees))
    y -= 13
    c.setFillColor(SLATE)
    c.setFont("Helvetica", 8)
    c.drawString(
        MARGIN + 10, y,
        f"Validity: {_day(document.package_start_date)} to {_day(document.package_end_date)}",
    )
    y -= 18

    c.setFillColor(NAVY)
    c.setFont("Helvetica", 10)
    for label, rate, amount in document.tax_lines:
        c.drawString(MARGIN, y, f"{label} @ {rate.normalize():f}%")
        c.drawRightString(W - MARGIN, y, _money(amount))
        y -= 15

    y -= 4
    c.line(CONTENT_W / 2 + MARGIN, y, W - MARGIN, y)
    y -= 16
    c.setFont("Helvetica-Bold", 11)
    c.drawString(CONTENT_W / 2 + MARGIN, y, "Total")
    c.drawRightString(W - MARGIN, y, _money(document.total_fees))
    y -= 30

    if document.payment_mode:
        c.setFillColor(SLATE)
        c.setFont("Helvetica", 9)
        payment = f"Paid by {document.payment_mode}"
        if document.payment_reference:
            payment += f" (ref {document.payment_reference})"
        c.drawString(MARGIN, y, payment)

    c.setFillColor(SLATE)
    c.setFont("Helvetica", 7)
    c.drawCentredString(W / 2, MARGIN / 2, "This is a computer generated invoice.")

    c.showPage()
    c.save()
    return path


async def render_membership_invoice(membership: Membership, member: Member, package: Package) -> str:
    """Build and render the invoice for a new membership without blocking the event loop."""
    document = InvoiceDocument.from_membership(membership, member, package)
    path = invoice_pdf_path(document.invoice_number)
    await asyncio.to_thread(render_invoice_pdf, document, path)
    logger.info("Invoice %s written to %s", document.invoice_number, path)
    return path
