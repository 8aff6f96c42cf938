"""
Tax Module.

Responsibility:
    Filer-level Canadian sales tax: strict per-transaction tax, input tax
    credits, period remittance, filing deadlines and reconciliation of
    externally supplied tax figures.  Component arithmetic comes from
    ``salestax_engines.tax``.

Invariants:
    - All monetary amounts use ``Decimal``.
    - Unknown jurisdictions raise ``InvalidJurisdictionError`` here, unlike
      the permissive standalone calculator.
"""

from salestax_modules.tax.config import EngineConfig, FilingFrequency, load_engine_config
from salestax_modules.tax.helpers import (
    is_eligible_for_itc,
    is_pst_recoverable,
    validate_business_number,
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
from salestax_modules.tax.service import CanadianTaxEngine

__all__ = [
    "CanadianTaxEngine",
    "Deadline",
    "EngineConfig",
    "FilingFrequency",
    "FilingPeriod",
    "ITCResult",
    "QuarterlyFiling",
    "RemittanceResult",
    "Transaction",
    "TransactionType",
    "ValidationResult",
    "is_eligible_for_itc",
    "is_pst_recoverable",
    "load_engine_config",
    "validate_business_number",
]
