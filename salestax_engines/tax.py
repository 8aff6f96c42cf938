"""
Tax Engine - Canadian GST/HST/PST/QST calculation.

Pure functions with no I/O.  Rates come from the jurisdiction rate table
(``salestax_config``); lookups here are permissive, so an unknown
province code is calculated under the default jurisdiction (Ontario)
instead of failing.  The strict path lives in
``salestax_modules.tax.service.CanadianTaxEngine``.

Rounding: each component (GST, provincial, HST) is rounded to the cent
independently, and the total is the sum of the rounded components.

Usage:
    from salestax_engines.tax import TaxCalculator

    calculator = TaxCalculator()
    result = calculator.forward("100.00", "BC")
    print(result.gst, result.pst, result.total_tax)  # 5.00 7.00 12.00
    print(result.after_tax)  # 112.00

    back = calculator.inverse("112.00", "BC")
    print(back.before_tax)  # ~100
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from salestax_config import JurisdictionRate, RateTable, get_rate_table
from salestax_kernel.domain.values import ZERO, Numeric, round_cents, to_decimal
from salestax_kernel.logging_config import get_logger

logger = get_logger("engines.tax")


class TaxType(str, Enum):
    """Kind of sales tax component."""

    GST = "GST"
    PST = "PST"
    HST = "HST"


@dataclass(frozen=True)
class TaxRates:
    """Rate fractions for one jurisdiction, provincial tax folded into ``pst``."""

    gst: Decimal
    pst: Decimal
    hst: Decimal
    total_rate: Decimal


@dataclass(frozen=True)
class TaxBreakdown:
    """
    Result of a tax calculation.

    ``total_tax`` is the sum of the already-rounded components and
    ``after_tax`` is ``round(before_tax + total_tax)``.
    """

    gst: Decimal
    pst: Decimal
    hst: Decimal
    total_tax: Decimal
    before_tax: Decimal
    after_tax: Decimal

    @classmethod
    def untaxed(cls, amount: Numeric) -> TaxBreakdown:
        """All-zero breakdown where before and after tax equal ``amount``."""
        value = to_decimal(amount)
        return cls(
            gst=ZERO,
            pst=ZERO,
            hst=ZERO,
            total_tax=ZERO,
            before_tax=value,
            after_tax=value,
        )

    @property
    def gst_hst(self) -> Decimal:
        """Federal-side tax: HST where harmonized, otherwise GST."""
        return self.gst + self.hst


@dataclass(frozen=True)
class TaxLine:
    """One itemized tax component, for invoices and receipts."""

    tax_type: TaxType
    rate: Decimal
    amount: Decimal
    description: str


@dataclass(frozen=True)
class JurisdictionSummary:
    """Display entry for a province or territory."""

    code: str
    name: str
    total_rate: Decimal


@dataclass(frozen=True)
class PeriodRange:
    """Inclusive ISO date range."""

    start: str
    end: str

    def contains(self, day: str) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class QuarterlySummary:
    """Expense-side (ITC) summary for a filing period."""

    period: PeriodRange
    count: int
    total_amount: Decimal
    total_tax_paid: Decimal
    input_tax_credits: Decimal


def compute_breakdown(amount: Numeric, rate: JurisdictionRate) -> TaxBreakdown:
    """
    Apply a jurisdiction's rates to a pre-tax amount.

    Shared by the permissive calculator and the strict engine so both
    produce identical numbers for a known jurisdiction.
    """
    before_tax = to_decimal(amount)
    gst = round_cents(before_tax * rate.gst)
    pst = round_cents(before_tax * rate.provincial_rate)
    hst = round_cents(before_tax * rate.hst)
    total_tax = round_cents(gst + pst + hst)
    return TaxBreakdown(
        gst=gst,
        pst=pst,
        hst=hst,
        total_tax=total_tax,
        before_tax=before_tax,
        after_tax=round_cents(before_tax + total_tax),
    )


def as_iso_date(value: str | date) -> str:
    """ISO ``YYYY-MM-DD`` string for a date or date string."""
    if isinstance(value, date):
        return value.isoformat()[:10]
    return str(value)[:10]


def record_field(record: Any, *names: str, default: Any = None) -> Any:
    """Read the first present field from a mapping or attribute-style record."""
    for name in names:
        if isinstance(record, Mapping):
            if name in record and record[name] is not None:
                return record[name]
        else:
            value = getattr(record, name, None)
            if value is not None:
                return value
    return default


def _percent(rate: Decimal, min_places: int = 1) -> str:
    """Format a rate fraction as a percentage, never dropping significant digits."""
    pct = (rate * 100).normalize()
    places = max(min_places, -pct.as_tuple().exponent)
    return f"{pct:.{places}f}"


class TaxCalculator:
    """
    Calculate Canadian sales taxes.

    Pure functions - no I/O, no shared mutable state.  The rate table is
    read-only, so one calculator may be shared across threads.
    """

    def __init__(self, rate_table: RateTable | None = None):
        self._rates = rate_table or get_rate_table()

    @property
    def rate_table(self) -> RateTable:
        return self._rates

    def forward(self, amount: Numeric, jurisdiction: str = "ON") -> TaxBreakdown:
        """
        Calculate tax on a pre-tax amount.

        Args:
            amount: Pre-tax amount in dollars.  Zero and negative amounts
                (credits, refunds) are valid and scale linearly.
            jurisdiction: Province/territory code, case-insensitive.
                Unknown codes use the default jurisdiction.

        Returns:
            TaxBreakdown with each component rounded to the cent.
        """
        rate = self._rates.rate_of(jurisdiction)
        result = compute_breakdown(amount, rate)
        logger.debug("tax_forward_calculated", extra={
            "jurisdiction": rate.code,
            "before_tax": str(result.before_tax),
            "total_tax": str(result.total_tax),
        })
        return result

    def inverse(self, total_amount: Numeric, jurisdiction: str = "ON") -> TaxBreakdown:
        """
        Recover the pre-tax amount from a tax-inclusive total.

        The base is ``total / (1 + total_rate)``, left unrounded, and the
        breakdown is then computed forward from it.  Because components are
        rounded independently, ``after_tax`` may differ from the supplied
        total by a cent.
        """
        rate = self._rates.rate_of(jurisdiction)
        before_tax = to_decimal(total_amount) / (1 + rate.total_rate)
        return compute_breakdown(before_tax, rate)

    def rates_of(self, jurisdiction: str) -> TaxRates:
        """Rate fractions for a jurisdiction (default jurisdiction when unknown)."""
        rate = self._rates.rate_of(jurisdiction)
        return TaxRates(
            gst=rate.gst,
            pst=rate.provincial_rate,
            hst=rate.hst,
            total_rate=rate.total_rate,
        )

    def all_jurisdictions(self) -> tuple[JurisdictionSummary, ...]:
        """All provinces and territories in display order."""
        return tuple(
            JurisdictionSummary(code=r.code, name=r.name, total_rate=r.total_rate)
            for r in self._rates
        )

    def itemize(self, amount: Numeric, jurisdiction: str = "ON") -> tuple[TaxLine, ...]:
        """
        Itemized tax lines for an amount, one per non-zero component.

        Descriptions read like ``"Ontario HST (13.0%)"`` and ``"GST (5.0%)"``.
        Provincial rates show at least two decimals: ``"British Columbia
        PST (7.00%)"``, ``"Quebec QST (9.975%)"``.
        """
        rate = self._rates.rate_of(jurisdiction)
        breakdown = compute_breakdown(amount, rate)
        lines: list[TaxLine] = []
        if rate.uses_hst:
            lines.append(TaxLine(
                tax_type=TaxType.HST,
                rate=rate.hst,
                amount=breakdown.hst,
                description=f"{rate.name} HST ({_percent(rate.hst)}%)",
            ))
        if rate.gst > 0:
            lines.append(TaxLine(
                tax_type=TaxType.GST,
                rate=rate.gst,
                amount=breakdown.gst,
                description=f"GST ({_percent(rate.gst)}%)",
            ))
        if rate.provincial_rate > 0:
            lines.append(TaxLine(
                tax_type=TaxType.PST,
                rate=rate.provincial_rate,
                amount=breakdown.pst,
                description=(
                    f"{rate.name} {rate.provincial_tax_label} "
                    f"({_percent(rate.provincial_rate, 2)}%)"
                ),
            ))
        return tuple(lines)

    def quarterly_summary(
        self,
        expenses: Iterable[Any],
        period_start: str | date,
        period_end: str | date,
    ) -> QuarterlySummary:
        """
        Summarize expense tax paid within an inclusive date range.

        Each expense is a mapping or object with ``amount``, ``tax_amount``
        (missing means zero) and ``date`` (or ``expense_date``) as an ISO
        string or ``date``.  Only the input-tax-credit side is reported;
        nothing is netted against tax collected.
        """
        period = PeriodRange(start=as_iso_date(period_start), end=as_iso_date(period_end))
        count = 0
        total_amount = Decimal("0")
        total_tax = Decimal("0")
        for expense in expenses:
            day = record_field(expense, "date", "expense_date")
            if day is None or not period.contains(as_iso_date(day)):
                continue
            count += 1
            total_amount += to_decimal(record_field(expense, "amount", default=0))
            total_tax += to_decimal(record_field(expense, "tax_amount", "taxAmount", default=0))

        total_tax_paid = round_cents(total_tax)
        logger.info("quarterly_summary_calculated", extra={
            "period_start": period.start,
            "period_end": period.end,
            "expense_count": count,
            "total_tax_paid": str(total_tax_paid),
        })
        return QuarterlySummary(
            period=period,
            count=count,
            total_amount=round_cents(total_amount),
            total_tax_paid=total_tax_paid,
            input_tax_credits=total_tax_paid,
        )


# Convenience functions for common scenarios

_default_calculator: TaxCalculator | None = None


def _calculator() -> TaxCalculator:
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = TaxCalculator()
    return _default_calculator


def forward(amount: Numeric, jurisdiction: str = "ON") -> TaxBreakdown:
    """Tax on a pre-tax amount using the bundled rate table."""
    return _calculator().forward(amount, jurisdiction)


def inverse(total_amount: Numeric, jurisdiction: str = "ON") -> TaxBreakdown:
    """Recover the pre-tax amount from a tax-inclusive total."""
    return _calculator().inverse(total_amount, jurisdiction)


def rates_of(jurisdiction: str) -> TaxRates:
    return _calculator().rates_of(jurisdiction)


def all_jurisdictions() -> tuple[JurisdictionSummary, ...]:
    return _calculator().all_jurisdictions()


def quarterly_summary(
    expenses: Iterable[Any],
    period_start: str | date,
    period_end: str | date,
) -> QuarterlySummary:
    return _calculator().quarterly_summary(expenses, period_start, period_end)
