"""
ORM-level immutability enforcement for vouchers and their audit trail.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners here check the ledger's write rules and raise
ImmutabilityViolationError, aborting the flush before anything is sent:

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
         |
    [before_delete] --> _check_*_delete() -------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Protected entities
------------------

Entity                | When immutable                      | Allowed
----------------------|-------------------------------------|---------------------------
VoucherWorkflowLog    | Always                              | INSERT only
Voucher               | Once APPROVED or REJECTED           | The transition itself,
                      |                                     | audit metadata columns
VoucherDetail         | When the parent voucher is not DRAFT| Nothing

The workflow service already refuses these writes with InvalidStateError;
the listeners catch code paths that bypass it.  They are registered once at
startup via register_immutability_listeners() (idempotent).
"""

from sqlalchemy import event, inspect, select
from sqlalchemy.orm.attributes import get_history

from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_COLUMNS = frozenset({"updated_at", "updated_by"})

_TERMINAL_STATUS_VALUES = frozenset({"approved", "rejected"})


def _status_value(status) -> str:
    return getattr(status, "value", status)


def _block(entity_type: str, entity_id, operation: str, reason: str, **extra):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            **extra,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_voucher_immutability(mapper, connection, target):
    """
    Prevent updates to vouchers that were already terminal before this flush.

    Logic:
        1. Status changing FROM approved/rejected: block.
        2. Status unchanged AND approved/rejected: block any other change.
        3. Status changing TO approved/rejected: allow (this is the transition).
    """
    status_history = get_history(target, "status")

    was_terminal_before = False
    if status_history.deleted:
        was_terminal_before = (
            _status_value(status_history.deleted[0]) in _TERMINAL_STATUS_VALUES
        )
    elif not status_history.added:
        was_terminal_before = _status_value(target.status) in _TERMINAL_STATUS_VALUES

    if not was_terminal_before:
        return

    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_COLUMNS or attr.key == "details":
            continue
        if attr.history.has_changes():
            _block(
                "Voucher",
                target.id,
                "UPDATE",
                f"Cannot modify field '{attr.key}' on {_status_value(target.status)} voucher",
                field=attr.key,
            )


def _check_voucher_delete(mapper, connection, target):
    if _status_value(target.status) in _TERMINAL_STATUS_VALUES:
        _block(
            "Voucher",
            target.id,
            "DELETE",
            f"{_status_value(target.status).capitalize()} vouchers cannot be deleted",
        )


def _parent_status(connection, target) -> str | None:
    """Status of a detail's voucher, read from the row if detached from it."""
    if target.voucher is not None:
        return _status_value(target.voucher.status)
    if target.voucher_id is None:
        return None
    from ledger_kernel.models.voucher import Voucher

    return connection.execute(
        select(Voucher.status).where(Voucher.id == target.voucher_id)
    ).scalar_one_or_none()


def _check_voucher_detail_immutability(mapper, connection, target):
    if _parent_status(connection, target) not in (None, "draft"):
        _block(
            "VoucherDetail",
            target.id,
            "UPDATE",
            "Voucher lines cannot be modified once the voucher leaves draft",
        )


def _check_voucher_detail_delete(mapper, connection, target):
    if _parent_status(connection, target) not in (None, "draft"):
        _block(
            "VoucherDetail",
            target.id,
            "DELETE",
            "Voucher lines cannot be deleted once the voucher leaves draft",
        )


def _check_workflow_log_immutability(mapper, connection, target):
    _block(
        "VoucherWorkflowLog",
        target.id,
        "UPDATE",
        "Workflow log entries are append-only",
    )


def _check_workflow_log_delete(mapper, connection, target):
    _block(
        "VoucherWorkflowLog",
        target.id,
        "DELETE",
        "Workflow log entries cannot be deleted",
    )


def _listeners():
    from ledger_kernel.models.voucher import Voucher, VoucherDetail
    from ledger_kernel.models.workflow_log import VoucherWorkflowLog

    return (
        (Voucher, "before_update", _check_voucher_immutability),
        (Voucher, "before_delete", _check_voucher_delete),
        (VoucherDetail, "before_update", _check_voucher_detail_immutability),
        (VoucherDetail, "before_delete", _check_voucher_detail_delete),
        (VoucherWorkflowLog, "before_update", _check_workflow_log_immutability),
        (VoucherWorkflowLog, "before_delete", _check_workflow_log_delete),
    )


def register_immutability_listeners() -> None:
    """Register all immutability listeners (safe to call more than once)."""
    for target, event_name, fn in _listeners():
        if not event.contains(target, event_name, fn):
            event.listen(target, event_name, fn)


def unregister_immutability_listeners() -> None:
    """
    Remove the immutability listeners.

    WARNING: Only for tests that must write a forbidden change to verify
    some other layer detects it.
    """
    for target, event_name, fn in _listeners():
        if event.contains(target, event_name, fn):
            event.remove(target, event_name, fn)
