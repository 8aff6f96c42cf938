"""
Tax Helpers -- Pure rule functions used by the tax engine.

Responsibility:
    Input-tax-credit eligibility and recoverability rules, filing
    deadline date arithmetic, and Business Number validation.

Architecture:
    Every function is pure: no I/O, no clock reads, no side effects.

Domain simplifications:
    - ITC eligibility is a description deny-list, not a full reading of
      the Excise Tax Act restrictions.
    - Only Quebec's QST is treated as recoverable provincial tax; every
      other PST is treated as a non-recoverable cost.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

from salestax_config import JurisdictionRate

# Substrings (lower-case) that mark an expense as ineligible for ITCs
ITC_INELIGIBLE_KEYWORDS: tuple[str, ...] = (
    "meals",
    "entertainment",
    "personal",
    "gift",
    "club membership",
)

# Filing deadline offsets
MONTHLY_DUE_DAY = 15  # day of the month following period end
ANNUAL_DUE_MONTH = 3  # March of the following year
ANNUAL_DUE_DAY = 31

_BN_PATTERN = re.compile(r"^(\d{9})([A-Z]{2})(\d{4})$")
_BN_WEIGHTS = (1, 2, 1, 2, 1, 2, 1, 2)


def is_eligible_for_itc(description: str | None) -> bool:
    """
    True unless the description names a restricted expense category.

    Expenses without a description are eligible.
    """
    if not description:
        return True
    text = description.lower()
    return not any(keyword in text for keyword in ITC_INELIGIBLE_KEYWORDS)


def is_pst_recoverable(rate: JurisdictionRate) -> bool:
    """Only QST is recoverable; other provincial sales taxes are a cost."""
    return rate.has_qst


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """(year, month) shifted by ``months`` (may be negative)."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def last_day_of_month(year: int, month: int) -> date:
    next_year, next_month = add_months(year, month, 1)
    return date(next_year, next_month, 1) - timedelta(days=1)


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def quarter_bounds(year: int, quarter: int) -> tuple[date, date]:
    """First and last day of a calendar quarter."""
    first_month = (quarter - 1) * 3 + 1
    return date(year, first_month, 1), last_day_of_month(year, first_month + 2)


def monthly_due_date(period_end: date) -> date:
    """The 15th of the month following the period end."""
    year, month = add_months(period_end.year, period_end.month, 1)
    return date(year, month, MONTHLY_DUE_DAY)


def quarterly_due_date(period_end: date) -> date:
    """The last day of the month following the period end."""
    year, month = add_months(period_end.year, period_end.month, 1)
    return last_day_of_month(year, month)


def annual_due_date(period_end: date) -> date:
    """March 31 of the year following the period end."""
    return date(period_end.year + 1, ANNUAL_DUE_MONTH, ANNUAL_DUE_DAY)


# ---------------------------------------------------------------------------
# Business Number
# ---------------------------------------------------------------------------


def validate_business_number(bn: str) -> bool:
    """
    Validate a CRA Business Number with program account, e.g. ``123456789RT0001``.

    Spaces are ignored and letters are case-insensitive.  The ninth digit
    is a check digit over the first eight, weighted 1,2,1,2,... with
    two-digit products reduced to their digit sum.
    """
    clean = re.sub(r"\s", "", bn or "").upper()
    match = _BN_PATTERN.match(clean)
    if not match:
        return False

    digits = match.group(1)
    total = 0
    for digit, weight in zip(digits[:8], _BN_WEIGHTS):
        product = int(digit) * weight
        if product > 9:
            product = product // 10 + product % 10
        total += product
    check_digit = (10 - total % 10) % 10
    return check_digit == int(digits[8])
