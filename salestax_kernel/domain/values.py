"""
Values -- Decimal conversion and cent rounding.

Responsibility:
    The single place where caller-supplied numbers become ``Decimal`` and
    where monetary results are rounded to the cent.

Invariants enforced:
    - Floats are converted through ``str()`` so ``33.33`` is the decimal
      literal 33.33, never its binary approximation.
    - Cent rounding is ``ROUND_HALF_UP`` (half-cents round away from zero),
      so rounding is symmetric under negation.

Failure modes:
    - ValueError when an amount cannot be interpreted as a finite number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Numeric = Decimal | int | float | str


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert an amount or rate to ``Decimal``.

    Raises:
        ValueError: If the value is not a finite number (NaN, infinity,
            unparseable string).
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a numeric amount: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return result


def round_cents(value: Numeric) -> Decimal:
    """
    Round to two decimal places, half-cents away from zero.

    Precision is widened to fit every integer digit, so very large amounts
    round instead of raising ``InvalidOperation``.
    """
    amount = to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    # Normalize negative zero so -0.00 compares and prints as 0.00
    return rounded if rounded else ZERO


def within_tolerance(a: Numeric, b: Numeric, tolerance: Numeric = CENT) -> bool:
    """True when ``|a - b| <= tolerance``."""
    return abs(to_decimal(a) - to_decimal(b)) <= to_decimal(tolerance)
