"""
Structured logging for the ledger kernel and its reports.

Every record under the ``ledger_kernel`` logger is written as one JSON
object per line:

    {"ts": ..., "level": "INFO", "logger": "ledger_kernel.kernel",
     "message": "voucher_created", "correlation_id": ..., "tenant_id": 1,
     "actor": "maker", "voucher_id": 12, "voucher_number": "Journal-HQ-..."}

The kernel binds the operation context (correlation id, tenant, actor,
voucher) around each unit of work; call sites pass event data through
``extra``.  When a LedgerKernelError is logged with ``exc_info`` its code
and attributes are flattened into ``exc_*`` fields.  Other exceptions
(driver errors in particular) contribute only their type and message, so
SQL statements and bound parameters never reach the log.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from ledger_kernel.exceptions import LedgerKernelError

LOGGER_NAMESPACE = "ledger_kernel"

CONTEXT_FIELDS = ("correlation_id", "tenant_id", "actor", "voucher_id")

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_context: ContextVar[Mapping[str, Any]] = ContextVar("ledger_log_context", default=_EMPTY)


class LogContext:
    """Operation fields attached to every record logged in the current context."""

    @staticmethod
    def get_all() -> dict[str, Any]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: Any):
        """
        Overlay ``fields`` on the current context for the duration of a
        ``with`` block.  None values are ignored; anything outside
        CONTEXT_FIELDS is a TypeError raised at the call.
        """
        unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context fields: {unknown}")
        return cls._bound({k: v for k, v in fields.items() if v is not None})

    @staticmethod
    @contextmanager
    def _bound(fields: dict[str, Any]) -> Iterator[None]:
        token = _context.set(MappingProxyType({**_context.get(), **fields}))
        try:
            yield
        finally:
            _context.reset(token)


# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, LedgerKernelError):
        fields["exc_code"] = exc.code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS and name not in payload:
                payload[name] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ledger_kernel namespace, e.g. get_logger("kernel")."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Send ledger_kernel records to ``handler`` (stderr by default) as JSON.

    Only the first call takes effect until reset_logging().  The namespace
    does not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(level.upper() if isinstance(level, str) else level)
        namespace.propagate = False
        target = handler or logging.StreamHandler(sys.stderr)
        target.setFormatter(StructuredFormatter())
        namespace.addHandler(target)


def reset_logging() -> None:
    """Drop the installed handler so configure_logging() applies again (tests)."""
    global _configured
    with _lock:
        _configured = False
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.handlers.clear()
        namespace.setLevel(logging.WARNING)
