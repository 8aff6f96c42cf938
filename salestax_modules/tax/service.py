"""
Canadian Tax Engine -- filer-level tax operations over the calculator.

Responsibility:
    Wraps the pure ``TaxCalculator`` with a filer's configuration (home
    jurisdiction, filing frequency) and adds transaction-level tax,
    input tax credits, period remittance, filing deadlines and
    reconciliation of externally supplied tax figures.

Architecture:
    salestax_modules -- filer-facing layer.
    All component arithmetic is delegated to
    ``salestax_engines.tax.compute_breakdown``; this layer owns jurisdiction
    policy, aggregation and the clock.

Invariants:
    - Jurisdiction lookups are STRICT: an unknown code raises
      ``InvalidJurisdictionError`` (the standalone calculator falls back
      to Ontario instead).
    - Income is taxed where the sale happened; expenses are attributed to
      the filer's home jurisdiction.
    - The clock is injected; nothing here calls ``date.today()``.
    - Amounts are ``Decimal`` throughout, rounded to the cent on output.

Failure modes:
    - ``InvalidJurisdictionError`` from strict lookups.
    - ``ValueError`` from malformed amounts or dates.
    - Validation mismatches are returned in ``ValidationResult.errors``,
      never raised.

Usage:
    engine = CanadianTaxEngine(
        EngineConfig(home_jurisdiction="ON", filing_frequency="quarterly"),
        clock=SystemClock(),
    )
    remittance = engine.calculate_remittance(
        income, expenses, "2024-01-01", "2024-03-31"
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from salestax_config import JurisdictionRate, RateTable, get_rate_table, normalize_code
from salestax_engines.tax import (
    PeriodRange,
    TaxBreakdown,
    TaxCalculator,
    as_iso_date,
    compute_breakdown,
    record_field,
)
from salestax_kernel.domain.clock import Clock, SystemClock
from salestax_kernel.domain.values import (
    ZERO,
    Numeric,
    round_cents,
    to_decimal,
    within_tolerance,
)
from salestax_kernel.logging_config import LogContext, get_logger
from salestax_modules.tax.config import EngineConfig, FilingFrequency
from salestax_modules.tax.helpers import (
    add_months,
    annual_due_date,
    is_eligible_for_itc,
    is_pst_recoverable,
    last_day_of_month,
    monthly_due_date,
    quarter_bounds,
    quarter_of,
    quarterly_due_date,
)
from salestax_modules.tax.models import (
    Deadline,
    FilingPeriod,
    ITCResult,
    QuarterlyFiling,
    RemittanceResult,
    Transaction,
    TransactionType,
    ValidationResult,
)

logger = get_logger("modules.tax.service")

VALIDATION_TOLERANCE = Decimal("0.01")

_VALIDATED_FIELDS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("gst", "GST", ("gst",)),
    ("pst", "PST", ("pst",)),
    ("hst", "HST", ("hst",)),
    ("total_tax", "Total tax", ("total_tax", "totalTax")),
)


class CanadianTaxEngine:
    """
    Filer-level Canadian sales tax engine.

    Contract:
        Constructed once per calculation context with an immutable
        ``EngineConfig``.  Every method is a pure function of its arguments,
        the configuration and the rate table, except ``calculate_remittance``
        (``is_overdue``) and ``get_upcoming_deadlines``, which read the
        injected clock.

    Non-goals:
        - Does not post journal entries or persist results.
        - Does not format amounts for display.
    """

    def __init__(
        self,
        config: EngineConfig,
        clock: Clock | None = None,
        rate_table: RateTable | None = None,
    ):
        self._config = config
        self._clock = clock or SystemClock()
        self._rates = rate_table or get_rate_table()
        self._calculator = TaxCalculator(self._rates)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def calculator(self) -> TaxCalculator:
        return self._calculator

    # =========================================================================
    # Transaction tax
    # =========================================================================

    def calculate_transaction_tax(
        self,
        amount: Numeric,
        jurisdiction: str,
        taxable: bool = True,
    ) -> TaxBreakdown:
        """
        Tax on one transaction.

        Non-taxable transactions return an all-zero breakdown with
        ``before_tax == after_tax == amount``.

        Raises:
            InvalidJurisdictionError: if ``jurisdiction`` is unknown
                (checked only for taxable transactions).
        """
        if not taxable:
            return TaxBreakdown.untaxed(amount)
        return compute_breakdown(amount, self._rates.require(jurisdiction))

    def determine_applicable_jurisdiction(self, transaction: Transaction) -> str:
        """
        Jurisdiction whose rules apply to a transaction.

        Income follows the point of sale; expenses are claimed under the
        filer's home jurisdiction regardless of where they were incurred.
        """
        if transaction.type == TransactionType.INCOME:
            return normalize_code(transaction.jurisdiction)
        return self._config.home_jurisdiction

    # =========================================================================
    # Strict rate queries
    # =========================================================================

    def gst_hst_rate(self, jurisdiction: str) -> Decimal:
        """HST rate in harmonized jurisdictions, otherwise the GST rate."""
        rate = self._rates.require(jurisdiction)
        return rate.hst if rate.uses_hst else rate.gst

    def pst_rate(self, jurisdiction: str) -> Decimal:
        """Provincial rate (PST or QST); zero where HST applies."""
        rate = self._rates.require(jurisdiction)
        return Decimal("0") if rate.uses_hst else rate.provincial_rate

    def is_hst_jurisdiction(self, jurisdiction: str) -> bool:
        return self._rates.require(jurisdiction).uses_hst

    # =========================================================================
    # Input tax credits
    # =========================================================================

    def calculate_itc(self, expenses: Iterable[Transaction]) -> ITCResult:
        """
        Input tax credits claimable on a set of expenses.

        Non-taxable expenses and expenses whose description names a
        restricted category count toward ``ineligible_amount``.  For eligible
        expenses the tax is recomputed under the expense's jurisdiction:
        HST is fully claimable, GST is claimable, and the provincial
        component is claimable only where it is recoverable (QST).
        """
        eligible = ZERO
        ineligible = ZERO
        gst_itc = ZERO
        pst_itc = ZERO
        hst_itc = ZERO
        count = 0

        for expense in expenses:
            count += 1
            if not expense.taxable or not is_eligible_for_itc(expense.description):
                ineligible += expense.amount
                continue

            eligible += expense.amount
            rate = self._rates.rate_of(expense.jurisdiction)
            tax = compute_breakdown(expense.amount, rate)
            if rate.uses_hst:
                hst_itc += tax.hst
            else:
                gst_itc += tax.gst
                if is_pst_recoverable(rate):
                    pst_itc += tax.pst

        gst_itc = round_cents(gst_itc)
        pst_itc = round_cents(pst_itc)
        hst_itc = round_cents(hst_itc)
        result = ITCResult(
            eligible_amount=round_cents(eligible),
            gst_itc=gst_itc,
            pst_itc=pst_itc,
            hst_itc=hst_itc,
            total_itc=round_cents(gst_itc + hst_itc + pst_itc),
            ineligible_amount=round_cents(ineligible),
        )
        logger.info("itc_calculated", extra={
            "expense_count": count,
            "eligible_amount": str(result.eligible_amount),
            "ineligible_amount": str(result.ineligible_amount),
            "total_itc": str(result.total_itc),
        })
        return result

    # =========================================================================
    # Remittance
    # =========================================================================

    def calculate_remittance(
        self,
        income: Iterable[Transaction],
        expenses: Iterable[Transaction],
        period_start: str | date,
        period_end: str | date,
    ) -> RemittanceResult:
        """
        Net GST/HST and provincial tax owed for a period.

        Transactions dated outside ``[period_start, period_end]`` are
        ignored.  Tax collected is recomputed per income transaction under
        its own jurisdiction; tax paid is the ITC over the period's expenses.
        A positive ``total_remittance`` is owed, a negative one refundable.
        """
        period = PeriodRange(start=as_iso_date(period_start), end=as_iso_date(period_end))

        with LogContext.bind(period=f"{period.start}..{period.end}"):
            gst_hst_collected = ZERO
            pst_collected = ZERO
            for txn in income:
                if not txn.taxable or not period.contains(txn.date):
                    continue
                tax = self._calculator.forward(txn.amount, txn.jurisdiction)
                gst_hst_collected += tax.gst_hst
                pst_collected += tax.pst

            itc = self.calculate_itc(
                txn for txn in expenses if period.contains(txn.date)
            )

            gst_hst_collected = round_cents(gst_hst_collected)
            pst_collected = round_cents(pst_collected)
            gst_hst_paid = round_cents(itc.gst_itc + itc.hst_itc)
            pst_paid = itc.pst_itc
            net_gst_hst = round_cents(gst_hst_collected - gst_hst_paid)
            net_pst = round_cents(pst_collected - pst_paid)

            due_date = self.calculate_due_date(date.fromisoformat(period.end))
            result = RemittanceResult(
                period=FilingPeriod(
                    start=period.start,
                    end=period.end,
                    frequency=self._config.filing_frequency.value,
                ),
                gst_hst_collected=gst_hst_collected,
                gst_hst_paid=gst_hst_paid,
                net_gst_hst=net_gst_hst,
                pst_collected=pst_collected,
                pst_paid=pst_paid,
                net_pst=net_pst,
                total_remittance=round_cents(net_gst_hst + net_pst),
                due_date=due_date,
                is_overdue=self._clock.today() > due_date,
            )
            logger.info("remittance_calculated", extra={
                "gst_hst_collected": str(result.gst_hst_collected),
                "gst_hst_paid": str(result.gst_hst_paid),
                "total_remittance": str(result.total_remittance),
                "due_date": result.due_date.isoformat(),
                "is_overdue": result.is_overdue,
            })
        return result

    # =========================================================================
    # Deadlines
    # =========================================================================

    def calculate_due_date(self, period_end: date) -> date:
        """Filing due date for a period ending on ``period_end``."""
        frequency = self._config.filing_frequency
        if frequency == FilingFrequency.MONTHLY:
            return monthly_due_date(period_end)
        if frequency == FilingFrequency.QUARTERLY:
            return quarterly_due_date(period_end)
        return annual_due_date(period_end)

    def get_upcoming_deadlines(self, months_ahead: int = 12) -> list[Deadline]:
        """
        Filing deadlines from today out to ``months_ahead`` months.

        Starts with the most recently ended period, so a return for last
        month or quarter that is still due appears first.  Annual filers get
        an empty list.
        """
        frequency = self._config.filing_frequency
        if frequency == FilingFrequency.ANNUAL:
            logger.warning("annual_deadlines_not_enumerated", extra={
                "home_jurisdiction": self._config.home_jurisdiction,
            })
            return []
        if months_ahead <= 0:
            return []

        today = self._clock.today()
        horizon_year, horizon_month = add_months(today.year, today.month, months_ahead)
        horizon = last_day_of_month(horizon_year, horizon_month)
        horizon = horizon.replace(day=min(today.day, horizon.day))

        deadlines: list[Deadline] = []
        for label, period_end in self._periods_from(today, frequency):
            due = self.calculate_due_date(period_end)
            if due > horizon:
                break
            if due >= today:
                deadlines.append(Deadline(
                    period=label,
                    due_date=due,
                    type=frequency.value,
                    days_until_due=(due - today).days,
                ))

        deadlines.sort(key=lambda d: d.days_until_due)
        return deadlines

    @staticmethod
    def _periods_from(today: date, frequency: FilingFrequency):
        """Yield (label, period_end) starting with the period before today's."""
        if frequency == FilingFrequency.MONTHLY:
            year, month = add_months(today.year, today.month, -1)
            while True:
                yield f"{year:04d}-{month:02d}", last_day_of_month(year, month)
                year, month = add_months(year, month, 1)
        else:
            year, month = add_months(today.year, (quarter_of(today) - 1) * 3 + 1, -3)
            while True:
                quarter = (month - 1) // 3 + 1
                yield f"{year:04d}-Q{quarter}", quarter_bounds(year, quarter)[1]
                year, month = add_months(year, month, 3)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_tax_calculation(
        self,
        amount: Numeric,
        candidate: TaxBreakdown | Mapping[str, Any],
        jurisdiction: str,
    ) -> ValidationResult:
        """
        Reconcile a supplied breakdown against the engine's own figures.

        Each of GST, PST, HST and total tax must be within a cent.  Missing
        candidate fields count as zero.

        Raises:
            InvalidJurisdictionError: if ``jurisdiction`` is unknown.
        """
        expected = self.calculate_transaction_tax(amount, jurisdiction)
        errors: list[str] = []
        for attr, label, names in _VALIDATED_FIELDS:
            want = getattr(expected, attr)
            got = to_decimal(record_field(candidate, *names, default=0))
            if not within_tolerance(want, got, VALIDATION_TOLERANCE):
                errors.append(f"{label} mismatch: expected {want}, got {got}")

        if errors:
            logger.warning("tax_validation_mismatch", extra={
                "jurisdiction": jurisdiction,
                "amount": str(to_decimal(amount)),
                "error_count": len(errors),
            })
        return ValidationResult(is_valid=not errors, errors=tuple(errors))

    # =========================================================================
    # Quarterly filing from pre-tallied sales
    # =========================================================================

    def quarterly_filing(
        self,
        sales: Iterable[Any],
        quarter: str,
        year: int,
        jurisdiction: str | None = None,
    ) -> QuarterlyFiling:
        """
        Quarterly GST/HST totals from sales rows that already carry
        ``amount``, ``gst_collected`` and ``gst_paid``.

        Raises:
            InvalidJurisdictionError: if ``jurisdiction`` is unknown.
        """
        rate: JurisdictionRate = self._rates.require(
            jurisdiction or self._config.home_jurisdiction
        )
        total_sales = ZERO
        collected = ZERO
        paid = ZERO
        for sale in sales:
            total_sales += to_decimal(record_field(sale, "amount", default=0))
            collected += to_decimal(record_field(sale, "gst_collected", "gstCollected", default=0))
            paid += to_decimal(record_field(sale, "gst_paid", "gstPaid", default=0))

        return QuarterlyFiling(
            quarter=quarter,
            year=year,
            total_sales=round_cents(total_sales),
            gst_hst_collected=round_cents(collected),
            gst_hst_paid=round_cents(paid),
            net_gst_hst_owing=round_cents(collected - paid),
            jurisdiction_name=rate.name,
        )
