"""
Voucher workflow state machine (``ledger_kernel.domain.workflow``).

Pure transition table for voucher status.  ZERO I/O.

    DRAFT --verify--> VERIFIED --approve--> APPROVED
      |                  |
      +-----reject-------+------reject----> REJECTED

* ``update`` is a self-transition allowed only in DRAFT.
* No transition skips a state and none is reversible.
* APPROVED and REJECTED are terminal: no outgoing edges.
"""

from __future__ import annotations

from enum import Enum

from ledger_kernel.exceptions import InvalidStateError
from ledger_kernel.models.voucher import VoucherStatus


class WorkflowAction(str, Enum):
    """Operations that touch voucher status."""

    CREATE = "create"
    UPDATE = "update"
    VERIFY = "verify"
    APPROVE = "approve"
    REJECT = "reject"


VOUCHER_TRANSITIONS: dict[VoucherStatus, frozenset[VoucherStatus]] = {
    VoucherStatus.DRAFT: frozenset({
        VoucherStatus.DRAFT,
        VoucherStatus.VERIFIED,
        VoucherStatus.REJECTED,
    }),
    VoucherStatus.VERIFIED: frozenset({
        VoucherStatus.APPROVED,
        VoucherStatus.REJECTED,
    }),
    VoucherStatus.APPROVED: frozenset(),
    VoucherStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES: frozenset[VoucherStatus] = frozenset({
    VoucherStatus.APPROVED,
    VoucherStatus.REJECTED,
})

# Statuses awaiting a verifier or approver
PENDING_STATUSES: frozenset[VoucherStatus] = frozenset({
    VoucherStatus.DRAFT,
    VoucherStatus.VERIFIED,
})

# Action -> (required source statuses, target status or None for "same")
ACTION_RULES: dict[WorkflowAction, tuple[frozenset[VoucherStatus], VoucherStatus | None]] = {
    WorkflowAction.UPDATE: (frozenset({VoucherStatus.DRAFT}), None),
    WorkflowAction.VERIFY: (frozenset({VoucherStatus.DRAFT}), VoucherStatus.VERIFIED),
    WorkflowAction.APPROVE: (frozenset({VoucherStatus.VERIFIED}), VoucherStatus.APPROVED),
    WorkflowAction.REJECT: (PENDING_STATUSES, VoucherStatus.REJECTED),
}

DEFAULT_LOG_COMMENTS: dict[WorkflowAction, str] = {
    WorkflowAction.CREATE: "Created",
    WorkflowAction.UPDATE: "Updated",
    WorkflowAction.VERIFY: "Verified",
    WorkflowAction.APPROVE: "Approved",
}


def is_valid_transition(current: VoucherStatus | str, target: VoucherStatus | str) -> bool:
    return VoucherStatus(target) in VOUCHER_TRANSITIONS[VoucherStatus(current)]


def is_terminal(status: VoucherStatus | str) -> bool:
    return VoucherStatus(status) in TERMINAL_STATUSES


def resolve_transition(
    voucher_id: int,
    current: VoucherStatus | str,
    action: WorkflowAction,
) -> VoucherStatus:
    """
    Return the status ``action`` leads to from ``current``.

    Raises:
        InvalidStateError: ``action`` is not allowed from ``current``.
    """
    current = VoucherStatus(current)
    sources, target = ACTION_RULES[action]
    if current not in sources:
        raise InvalidStateError(voucher_id, current.value, action.value)
    target = current if target is None else target
    # ACTION_RULES and VOUCHER_TRANSITIONS must agree
    assert is_valid_transition(current, target)
    return target
