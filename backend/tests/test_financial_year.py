"""
Tests for financial year codes, expiry boundaries and invoice numbering.
"""
import pytest
from datetime import date, datetime, timezone, timedelta

from app.models.package import Package
from app.services.financial_year import (
    financial_year_code,
    financial_year_end_date,
    financial_year_start_year,
    package_end_date,
)
from app.services.invoice_numbering import (
    generate_invoice_number,
    next_invoice_number,
    parse_invoice_sequence,
)
from app.models.membership import Membership
from fakes import FakeMembershipStore


class TestFinancialYearCode:
    """FY runs 1 April to 31 March."""

    def test_february_belongs_to_previous_year(self):
        assert financial_year_code(datetime(2024, 2, 15, tzinfo=timezone.utc)) == "2324"

    def test_april_starts_new_year(self):
        assert financial_year_code(datetime(2024, 4, 15, tzinfo=timezone.utc)) == "2425"

    def test_boundaries(self):
        assert financial_year_code(date(2024, 3, 31)) == "2324"
        assert financial_year_code(date(2024, 4, 1)) == "2425"

    def test_century_rollover(self):
        assert financial_year_code(date(2099, 6, 1)) == "9900"

    def test_start_year(self):
        assert financial_year_start_year(date(2025, 1, 10)) == 2024
        assert financial_year_start_year(date(2025, 12, 10)) == 2025


class TestFinancialYearEndDate:
    """Expiry boundary is 30 March of the FY end year."""

    def test_mid_year(self):
        start = datetime(2024, 7, 1, 9, 30, tzinfo=timezone.utc)
        assert financial_year_end_date(start) == datetime(2025, 3, 30, 9, 30, tzinfo=timezone.utc)

    def test_january(self):
        assert financial_year_end_date(date(2025, 1, 20)) == date(2025, 3, 30)

    def test_keeps_timezone(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        end = financial_year_end_date(datetime(2024, 11, 5, 18, 0, tzinfo=ist))
        assert end.tzinfo == ist
        assert (end.month, end.day, end.hour) == (3, 30, 18)

    def test_start_on_31_march_is_already_past_boundary(self):
        start = datetime(2025, 3, 31, tzinfo=timezone.utc)
        assert financial_year_end_date(start) == datetime(2025, 3, 30, tzinfo=timezone.utc)

    def test_package_period_is_ignored(self):
        start = datetime(2024, 5, 1, tzinfo=timezone.utc)
        short = Package(name="Quarterly", period_months=3)
        long = Package(name="Biennial", period_months=24)
        assert package_end_date(start, short) == package_end_date(start, long)
        assert package_end_date(start, short) == datetime(2025, 3, 30, tzinfo=timezone.utc)


class TestInvoiceSequence:
    """Invoice numbers are "<fy code>-NNNNN"."""

    def test_parse(self):
        assert parse_invoice_sequence("2324-00042", "2324-") == 42
        assert parse_invoice_sequence("2324-ABC", "2324-") is None
        assert parse_invoice_sequence("2425-00001", "2324-") is None

    def test_first_number(self):
        assert next_invoice_number("2324-", []) == "2324-00001"

    def test_uses_highest_suffix(self):
        existing = ["2324-00001", "2324-00007", "2324-00003"]
        assert next_invoice_number("2324-", existing) == "2324-00008"

    def test_malformed_suffixes_ignored(self):
        assert next_invoice_number("2324-", ["2324-XYZ", "2324-"]) == "2324-00001"

    @pytest.mark.asyncio
    async def test_generate_scans_only_its_financial_year(self):
        store = FakeMembershipStore()
        for number in ("2324-00001", "2324-00002", "2425-00010"):
            store.put(Membership(invoice_number=number))

        assert await generate_invoice_number(store, date(2024, 2, 1)) == "2324-00003"
        assert await generate_invoice_number(store, date(2024, 4, 1)) == "2425-00011"
        assert await generate_invoice_number(store, date(2026, 4, 1)) == "2627-00001"
