"""
salestax_config -- jurisdiction rate table and configuration loading.

Responsibility:
    Owns the static rate table for the 13 provinces and territories.  The
    bundled YAML file is parsed once per process by ``get_rate_table()``;
    the resulting ``RateTable`` is immutable, so concurrent readers need no
    locking after the first load.

Architecture position:
    Configuration -- sits above ``salestax_kernel`` and below
    ``salestax_engines`` / ``salestax_modules``.
"""

from __future__ import annotations

import threading

from salestax_config.loader import load_rate_table, load_yaml_file
from salestax_config.schema import JurisdictionRate, RateTable, normalize_code

__all__ = [
    "JurisdictionRate",
    "RateTable",
    "get_rate_table",
    "load_rate_table",
    "load_yaml_file",
    "normalize_code",
]

_table: RateTable | None = None
_lock = threading.Lock()


def get_rate_table() -> RateTable:
    """Return the process-wide rate table, loading it on first use."""
    global _table
    if _table is None:
        with _lock:
            if _table is None:
                _table = load_rate_table()
    return _table
