"""
Pytest fixtures for the sales tax test suite.

Provides:
- The bundled rate table and a calculator over it
- A tax engine pinned to a deterministic clock
- A transaction factory
"""

from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from salestax_config import get_rate_table
from salestax_engines.tax import TaxCalculator
from salestax_kernel.domain.clock import DeterministicClock
from salestax_kernel.logging_config import LogContext, reset_logging
from salestax_modules.tax import (
    CanadianTaxEngine,
    EngineConfig,
    FilingFrequency,
    Transaction,
    TransactionType,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def rate_table():
    return get_rate_table()


@pytest.fixture
def calculator(rate_table):
    return TaxCalculator(rate_table)


@pytest.fixture
def clock():
    """Clock pinned to 2024-04-15, inside the Q1 2024 filing window."""
    return DeterministicClock.on(date(2024, 4, 15))


@pytest.fixture
def engine(clock):
    """Ontario quarterly filer."""
    config = EngineConfig(
        home_jurisdiction="ON",
        filing_frequency=FilingFrequency.QUARTERLY,
    )
    return CanadianTaxEngine(config, clock=clock)


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults."""
    ids = count(1)

    def _make(
        amount="100.00",
        jurisdiction="ON",
        type=TransactionType.EXPENSE,
        date="2024-02-15",
        taxable=True,
        description=None,
        tax_amount="0",
    ) -> Transaction:
        return Transaction(
            id=f"txn-{next(ids)}",
            amount=Decimal(str(amount)),
            date=date,
            jurisdiction=jurisdiction,
            type=type,
            tax_amount=Decimal(str(tax_amount)),
            taxable=taxable,
            description=description,
        )

    return _make
