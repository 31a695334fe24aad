"""
Financial-year scoped invoice numbers: "<fy code>-<5 digit sequence>", e.g. 2324-00001.
"""
import logging
from datetime import date
from typing import Iterable, Optional

from app.services.financial_year import financial_year_code
from app.services.ports import MembershipStore

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 5


def invoice_prefix(invoice_date: date) -> str:
    return f"{financial_year_code(invoice_date)}-"


def parse_invoice_sequence(invoice_number: str, prefix: str) -> Optional[int]:
    """Numeric suffix of `invoice_number`, or None when it is not ours to count."""
    if not invoice_number or not invoice_number.startswith(prefix):
        return None
    suffix = invoice_number[len(prefix):]
    if not suffix.isdecimal():
        return None
    return int(suffix)


def next_invoice_number(prefix: str, existing: Iterable[str]) -> str:
    highest = 0
    for number in existing:
        sequence = parse_invoice_sequence(number, prefix)
        if sequence is not None and sequence > highest:
            highest = sequence
    return f"{prefix}{highest + 1:0{SEQUENCE_WIDTH}d}"


async def generate_invoice_number(store: MembershipStore, invoice_date: date) -> str:
    """
    Next invoice number for the financial year of `invoice_date`.

    Scan-then-increment is not atomic. Two concurrent purchases in the same
    financial year can compute the same number; the unique index on
    memberships.invoice_number rejects the second insert with a conflict.
    """
    prefix = invoice_prefix(invoice_date)
    existing = await store.list_invoice_numbers(prefix)
    invoice_number = next_invoice_number(prefix, existing)
    logger.debug("Assigned invoice number %s (%d existing in FY)", invoice_number, len(existing))
    return invoice_number
