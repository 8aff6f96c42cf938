"""
Typed Exception Hierarchy for the Sales Tax packages.

Every error carries a ``code`` class attribute so callers can catch by type
and report by code without parsing messages:

    SalesTaxError (base)
    |
    +-- JurisdictionError
        +-- InvalidJurisdictionError

Category        | Code                  | When Raised
----------------|-----------------------|------------------------------------------
Jurisdiction    | INVALID_JURISDICTION  | Strict lookup of an unknown province code

Only the strict lookup path raises. The permissive calculator falls back
to the default jurisdiction instead, and validation mismatches are returned
as data, not raised.

Handling pattern:

    try:
        breakdown = engine.calculate_transaction_tax(amount, code)
    except InvalidJurisdictionError as e:
        api_response(code=e.code, jurisdiction=e.jurisdiction)
"""


class SalesTaxError(Exception):
    """
    Base exception for all sales tax errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SALES_TAX_ERROR"


class JurisdictionError(SalesTaxError):
    """Base exception for jurisdiction-related errors."""

    code: str = "JURISDICTION_ERROR"


class InvalidJurisdictionError(JurisdictionError):
    """Jurisdiction code is not in the rate table."""

    code: str = "INVALID_JURISDICTION"

    def __init__(self, jurisdiction: str):
        self.jurisdiction = jurisdiction
        super().__init__(f"Invalid province code: {jurisdiction}")
