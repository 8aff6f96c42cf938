"""
Rate table schema.

The jurisdiction rate table is the static source of truth for every tax
calculation.  The YAML data file is parsed into these types by the loader;
after that nothing mutates them.

Two lookups with different contracts live side by side:

  RateTable.rate_of(code)  -- permissive: unknown codes fall back to the
                              default jurisdiction.
  RateTable.require(code)  -- strict: unknown codes raise
                              InvalidJurisdictionError.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from salestax_kernel.exceptions import InvalidJurisdictionError
from salestax_kernel.logging_config import get_logger

logger = get_logger("config.schema")

_ZERO = Decimal("0")


def normalize_code(code: str) -> str:
    """Upper-case and strip a jurisdiction code."""
    return (code or "").strip().upper()


@dataclass(frozen=True)
class JurisdictionRate:
    """Tax composition of one province or territory."""

    code: str
    name: str
    gst: Decimal = _ZERO
    pst: Decimal = _ZERO
    hst: Decimal = _ZERO
    qst: Decimal | None = None  # Quebec's provincial tax
    provincial_tax_label: str = "PST"

    def __post_init__(self) -> None:
        for field_name in ("gst", "pst", "hst", "qst"):
            value = getattr(self, field_name)
            if value is not None and value < _ZERO:
                raise ValueError(
                    f"{self.code}: {field_name} rate cannot be negative"
                )

    @property
    def provincial_rate(self) -> Decimal:
        """PST plus QST, the rate applied to the provincial component."""
        return self.pst + (self.qst or _ZERO)

    @property
    def total_rate(self) -> Decimal:
        return self.gst + self.provincial_rate + self.hst

    @property
    def uses_hst(self) -> bool:
        return self.hst > _ZERO

    @property
    def has_qst(self) -> bool:
        return self.qst is not None and self.qst > _ZERO


class RateTable:
    """
    Immutable mapping of jurisdiction code to ``JurisdictionRate``.

    Iteration yields rates in display order (alphabetical by code).
    """

    def __init__(
        self,
        rates: Mapping[str, JurisdictionRate],
        default_code: str = "ON",
    ):
        default_code = normalize_code(default_code)
        if default_code not in rates:
            raise ValueError(
                f"Default jurisdiction {default_code} missing from rate table"
            )
        ordered = {code: rates[code] for code in sorted(rates)}
        self._rates: Mapping[str, JurisdictionRate] = MappingProxyType(ordered)
        self._default_code = default_code

    @property
    def default_code(self) -> str:
        return self._default_code

    @property
    def default(self) -> JurisdictionRate:
        return self._rates[self._default_code]

    def contains(self, code: str) -> bool:
        return normalize_code(code) in self._rates

    __contains__ = contains

    def rate_of(self, code: str) -> JurisdictionRate:
        """Look up a jurisdiction, falling back to the default when unknown."""
        rate = self._rates.get(normalize_code(code))
        if rate is None:
            logger.debug("jurisdiction_fallback", extra={
                "requested": code,
                "fallback": self._default_code,
            })
            return self.default
        return rate

    def require(self, code: str) -> JurisdictionRate:
        """Look up a jurisdiction, raising when the code is unknown."""
        rate = self._rates.get(normalize_code(code))
        if rate is None:
            logger.warning("jurisdiction_invalid", extra={"requested": code})
            raise InvalidJurisdictionError(code)
        return rate

    def codes(self) -> tuple[str, ...]:
        return tuple(self._rates)

    def __iter__(self) -> Iterator[JurisdictionRate]:
        return iter(self._rates.values())

    def __len__(self) -> int:
        return len(self._rates)
