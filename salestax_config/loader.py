"""
Configuration Loader (``salestax_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the typed dataclasses of
``salestax_config.schema``.  Runtime callers normally go through
``salestax_config.get_rate_table()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``jurisdictions`` or ``name`` keys  -> ``KeyError`` propagates.
* Negative rates, unknown default  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from salestax_config.schema import JurisdictionRate, RateTable, normalize_code
from salestax_kernel.domain.values import to_decimal
from salestax_kernel.logging_config import get_logger

logger = get_logger("config.loader")

DEFAULT_RATES_PATH = Path(__file__).parent / "data" / "jurisdictions.yaml"


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_jurisdiction_rate(code: str, data: dict[str, Any]) -> JurisdictionRate:
    """Parse one jurisdiction entry."""
    qst = data.get("qst")
    return JurisdictionRate(
        code=normalize_code(code),
        name=data["name"],
        gst=to_decimal(data.get("gst", "0")),
        pst=to_decimal(data.get("pst", "0")),
        hst=to_decimal(data.get("hst", "0")),
        qst=to_decimal(qst) if qst is not None else None,
        provincial_tax_label=data.get("provincial_tax_label", "PST"),
    )


def parse_rate_table(data: dict[str, Any]) -> RateTable:
    """Build a ``RateTable`` from a parsed YAML document."""
    entries = data["jurisdictions"]
    rates = {}
    for code, entry in entries.items():
        rate = parse_jurisdiction_rate(str(code), entry)
        rates[rate.code] = rate
    return RateTable(rates, default_code=str(data.get("default_jurisdiction", "ON")))


def load_rate_table(path: Path | str | None = None) -> RateTable:
    """Load a rate table from ``path`` (the bundled table when omitted)."""
    p = Path(path) if path is not None else DEFAULT_RATES_PATH
    table = parse_rate_table(load_yaml_file(p))
    logger.info("rate_table_loaded", extra={
        "path": str(p),
        "jurisdiction_count": len(table),
        "default_jurisdiction": table.default_code,
    })
    return table
