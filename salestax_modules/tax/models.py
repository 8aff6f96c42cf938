"""
Tax Domain Models.

Responsibility:
    Frozen dataclass DTOs for the engine's inputs (transactions) and
    derived results (ITCs, remittance, deadlines, validation).  None of
    these are persisted by the engine; the caller owns their lifecycle.

Invariants:
    - All models are ``frozen=True`` (immutable after construction).
    - All monetary fields are ``Decimal``; ``Transaction`` converts plain
      numbers on construction.
    - Dates are ISO ``YYYY-MM-DD`` strings (timestamps are cut to the day)
      so period filtering can compare them lexicographically.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from salestax_engines.tax import as_iso_date
from salestax_kernel.domain.values import to_decimal


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Transaction:
    """An income or expense transaction handed to the engine."""

    id: str
    amount: Decimal
    date: str
    jurisdiction: str
    type: TransactionType
    tax_amount: Decimal = Decimal("0")
    taxable: bool = True
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "tax_amount", to_decimal(self.tax_amount))
        object.__setattr__(self, "date", as_iso_date(self.date))
        if not isinstance(self.type, TransactionType):
            object.__setattr__(self, "type", TransactionType(str(self.type).lower()))

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


@dataclass(frozen=True)
class ITCResult:
    """Input tax credits claimable on a set of expenses."""

    eligible_amount: Decimal
    gst_itc: Decimal
    pst_itc: Decimal
    hst_itc: Decimal
    total_itc: Decimal
    ineligible_amount: Decimal


@dataclass(frozen=True)
class FilingPeriod:
    """A reporting period at the filer's frequency."""

    start: str
    end: str
    frequency: str


@dataclass(frozen=True)
class RemittanceResult:
    """Net tax owed (positive) or refundable (negative) for a period."""

    period: FilingPeriod
    gst_hst_collected: Decimal
    gst_hst_paid: Decimal
    net_gst_hst: Decimal
    pst_collected: Decimal
    pst_paid: Decimal
    net_pst: Decimal
    total_remittance: Decimal
    due_date: date
    is_overdue: bool


@dataclass(frozen=True)
class Deadline:
    """An upcoming filing deadline."""

    period: str
    due_date: date
    type: str
    days_until_due: int


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of reconciling a supplied breakdown against the engine."""

    is_valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuarterlyFiling:
    """Quarterly GST/HST totals built from pre-tallied sales figures."""

    quarter: str
    year: int
    total_sales: Decimal
    gst_hst_collected: Decimal
    gst_hst_paid: Decimal
    net_gst_hst_owing: Decimal
    jurisdiction_name: str
