"""
Tax Engine Configuration Schema.

Holds the filer's home jurisdiction and filing frequency.  Registration
numbers are informational and never affect a calculation.

    config = EngineConfig(home_jurisdiction="ON", filing_frequency="quarterly")
    config = load_engine_config("filer.yaml")

YAML shape accepted by ``load_engine_config``:

    home_jurisdiction: "ON"
    filing_frequency: quarterly
    registration_numbers:
      gst_hst: 123456782RT0001
      qst: "1234567890TQ0001"
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from salestax_config import get_rate_table, load_yaml_file, normalize_code
from salestax_kernel.logging_config import get_logger
from salestax_modules.tax.helpers import validate_business_number

logger = get_logger("modules.tax.config")


class FilingFrequency(str, Enum):
    """How often the filer reports and remits."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for one calculation context.

    Raises ``ValueError`` for an unknown home jurisdiction or filing
    frequency.  The jurisdiction is stored upper-cased.
    """

    home_jurisdiction: str = "ON"
    filing_frequency: FilingFrequency = FilingFrequency.QUARTERLY
    gst_hst_registration_number: str | None = None
    pst_registration_number: str | None = None
    qst_registration_number: str | None = None

    def __post_init__(self) -> None:
        code = normalize_code(self.home_jurisdiction)
        if code not in get_rate_table():
            raise ValueError(f"Unknown home jurisdiction: {self.home_jurisdiction}")
        object.__setattr__(self, "home_jurisdiction", code)

        frequency = self.filing_frequency
        if not isinstance(frequency, FilingFrequency):
            try:
                frequency = FilingFrequency(str(frequency).strip().lower())
            except ValueError:
                raise ValueError(
                    f"Invalid filing_frequency: {self.filing_frequency!r}. "
                    f"Must be one of {[f.value for f in FilingFrequency]}"
                ) from None
            object.__setattr__(self, "filing_frequency", frequency)

        logger.debug("engine_config_initialized", extra={
            "home_jurisdiction": code,
            "filing_frequency": frequency.value,
            "has_gst_hst_registration": self.gst_hst_registration_number is not None,
        })

    def registration_is_valid(self) -> bool:
        """True when a GST/HST Business Number is set and passes its check digit."""
        if not self.gst_hst_registration_number:
            return False
        return validate_business_number(self.gst_hst_registration_number)


def load_engine_config(path: Path | str) -> EngineConfig:
    """
    Load an ``EngineConfig`` from a YAML file.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: for an unknown jurisdiction or frequency.
    """
    data = load_yaml_file(path)
    numbers = data.get("registration_numbers") or {}
    config = EngineConfig(
        home_jurisdiction=str(data.get("home_jurisdiction", "ON")),
        filing_frequency=data.get("filing_frequency", FilingFrequency.QUARTERLY),
        gst_hst_registration_number=_optional_str(numbers.get("gst_hst")),
        pst_registration_number=_optional_str(numbers.get("pst")),
        qst_registration_number=_optional_str(numbers.get("qst")),
    )
    logger.info("engine_config_loaded", extra={
        "path": str(path),
        "home_jurisdiction": config.home_jurisdiction,
        "filing_frequency": config.filing_frequency.value,
    })
    return config


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)
