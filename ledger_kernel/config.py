"""
Kernel Configuration (``ledger_kernel.config``).

Responsibility
--------------
Typed, frozen configuration for the ledger kernel: database connection,
engine pool sizing, per-statement timeout, log level, voucher numbering
width and the decimal places used when converting to and from minor units.

Sources, in order of precedence (later wins):

1. Defaults on :class:`KernelConfig`.
2. A YAML file (``from_yaml``), or the path named by ``LEDGER_CONFIG``.
3. ``LEDGER_DATABASE_URL`` / ``DATABASE_URL`` environment variables.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Self

import yaml

from ledger_kernel.logging_config import get_logger

logger = get_logger("config")

CONFIG_PATH_ENV = "LEDGER_CONFIG"
DATABASE_URL_ENVS = ("LEDGER_DATABASE_URL", "DATABASE_URL")

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top-level document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML document must be a mapping")
    return data


def _kernel_section(data: dict[str, Any]) -> dict[str, Any]:
    if "kernel" in data:
        return dict(data["kernel"] or {})
    return {k: v for k, v in data.items() if k != "reporting"}


@dataclass(frozen=True)
class KernelConfig:
    """
    Runtime configuration for the ledger kernel.

    The in-memory SQLite default is meant for tests and local exploration;
    production deployments point ``database_url`` at PostgreSQL.
    """

    database_url: str = "sqlite+pysqlite:///:memory:"
    echo: bool = False

    # Connection pool (ignored for SQLite)
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    # Per-statement timeout in milliseconds; 0 disables it
    statement_timeout_ms: int = 30_000

    log_level: str = "INFO"

    # Digits in the sequence part of a voucher number
    voucher_sequence_width: int = 6

    # Minor units per major unit is 10 ** money_decimal_places
    money_decimal_places: int = 2

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("database_url must not be empty")
        if self.pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        if self.max_overflow < 0:
            raise ValueError("max_overflow cannot be negative")
        if self.statement_timeout_ms < 0:
            raise ValueError("statement_timeout_ms cannot be negative")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        if not 1 <= self.voucher_sequence_width <= 12:
            raise ValueError("voucher_sequence_width must be between 1 and 12")
        if not 0 <= self.money_decimal_places <= 6:
            raise ValueError("money_decimal_places must be between 0 and 6")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("kernel_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown kernel config keys: {sorted(unknown)}")
        logger.info(
            "kernel_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """
        Load config from a YAML file.

        The file may hold the settings at the top level or under a
        ``kernel:`` key (so one file can also carry ``reporting:``).
        """
        section = _kernel_section(load_yaml_file(path))
        logger.info("kernel_config_loaded_from_yaml", extra={"path": str(path)})
        return cls.from_dict(section)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """
        Build config from the process environment.

        ``LEDGER_CONFIG`` names an optional YAML file; a database URL
        found in ``LEDGER_DATABASE_URL`` or ``DATABASE_URL`` overrides
        the file's value.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        config_path = env.get(CONFIG_PATH_ENV)
        if config_path:
            data.update(_kernel_section(load_yaml_file(config_path)))
        for name in DATABASE_URL_ENVS:
            url = env.get(name)
            if url:
                data["database_url"] = url
                break
        return cls.from_dict(data)
