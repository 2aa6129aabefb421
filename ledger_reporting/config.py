"""
Reporting Configuration Schema.

Labels and presentation switches for the financial statements.  Amounts are
never configurable: sign conventions are fixed by account type.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Self

from ledger_kernel.config import load_yaml_file
from ledger_kernel.logging_config import get_logger

logger = get_logger("reporting.config")


@dataclass(frozen=True)
class ReportingConfig:
    """
    Configuration schema for the reporting layer.

    ``include_zero_balances`` applies to statement sections only; the trial
    balance always lists every account in the catalog.
    """

    # Entity name shown on report metadata
    entity_name: str = "Company"

    # Synthetic equity line on the balance sheet
    retained_earnings_label: str = "Net Income (Retained Earnings)"
    retained_earnings_code: str = "RE"

    # Show accounts whose statement amount is zero
    include_zero_balances: bool = False

    # Check the account tree before building statements
    validate_hierarchy: bool = True

    def __post_init__(self):
        if not self.retained_earnings_code:
            raise ValueError("retained_earnings_code must not be empty")
        if not self.retained_earnings_label:
            raise ValueError("retained_earnings_label must not be empty")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create config from a mapping, rejecting unknown keys."""
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown reporting config keys: {sorted(unknown)}")
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """Load the ``reporting:`` section of a YAML file (empty if absent)."""
        data = load_yaml_file(path)
        return cls.from_dict(data.get("reporting") or {})
