"""Database layer - engine, base classes, money types, immutability listeners."""

from ledger_kernel.db.base import Base, IdType, TrackedBase
from ledger_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_config,
    init_engine_from_url,
    session_scope,
)
from ledger_kernel.db.types import (
    MinorUnits,
    format_minor_units,
    from_minor_units,
    to_minor_units,
)

__all__ = [
    "Base",
    "IdType",
    "MinorUnits",
    "TrackedBase",
    "create_tables",
    "format_minor_units",
    "from_minor_units",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_config",
    "init_engine_from_url",
    "session_scope",
    "to_minor_units",
]
