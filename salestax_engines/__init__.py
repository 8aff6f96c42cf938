"""
Module: salestax_engines
Responsibility:
    Package entrypoint that re-exports the pure calculation engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import salestax_kernel and salestax_config.
    MUST NOT import salestax_modules.

Invariants enforced:
    - Purity: engines never read the clock.
    - Decimal-only arithmetic for every monetary amount.
    - Determinism: identical inputs always produce identical outputs.
"""

from salestax_engines.tax import (
    JurisdictionSummary,
    PeriodRange,
    QuarterlySummary,
    TaxBreakdown,
    TaxCalculator,
    TaxLine,
    TaxRates,
    TaxType,
    all_jurisdictions,
    compute_breakdown,
    forward,
    inverse,
    quarterly_summary,
    rates_of,
)

__all__ = [
    "JurisdictionSummary",
    "PeriodRange",
    "QuarterlySummary",
    "TaxBreakdown",
    "TaxCalculator",
    "TaxLine",
    "TaxRates",
    "TaxType",
    "all_jurisdictions",
    "compute_breakdown",
    "forward",
    "inverse",
    "quarterly_summary",
    "rates_of",
]
