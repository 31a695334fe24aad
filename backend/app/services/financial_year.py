"""
Indian financial year helpers (1 April - 31 March).

Boundaries are taken from the calendar fields of the value passed in. Every
instant stored by the API is normalised to UTC, so an invoice raised just
after midnight IST on 1 April (still 31 March in UTC) is numbered in the
financial year that is closing.
"""
from datetime import date, datetime
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from app.models.package import Package

D = TypeVar("D", date, datetime)

FY_START_MONTH = 4

# Memberships lapse on 30 March, one day before the financial year closes.
# Existing member expiry data depends on this, do not "fix" it to the 31st.
FY_EXPIRY_MONTH = 3
FY_EXPIRY_DAY = 30


def financial_year_start_year(moment: date) -> int:
    """
    Calendar year in which the financial year containing `moment` began.

    Evaluated in the tz of `moment`; API callers pass UTC datetimes.
    """
    if moment.month >= FY_START_MONTH:
        return moment.year
    return moment.year - 1


def financial_year_code(moment: date) -> str:
    """
    Four digit financial year code.

    2024-02-15 falls in FY 2023-24 and yields "2324";
    2024-04-15 falls in FY 2024-25 and yields "2425".
    """
    start_year = financial_year_start_year(moment)
    return f"{start_year % 100:02d}{(start_year + 1) % 100:02d}"


def financial_year_end_date(moment: D) -> D:
    """
    Expiry boundary of the financial year containing `moment`.

    Returns 30 March of the year the financial year ends in, keeping the
    time of day and tzinfo of a datetime input.
    """
    end_year = financial_year_start_year(moment) + 1
    return moment.replace(year=end_year, month=FY_EXPIRY_MONTH, day=FY_EXPIRY_DAY)


def package_end_date(start: D, package: "Package") -> D:
    """
    End date of a package bought to start at `start`.

    Every package snaps to the financial year boundary; the package's own
    period_months is not used.
    """
    return financial_year_end_date(start)
