"""
ORM immutability listeners.

Approved and rejected vouchers, detail lines of vouchers past draft, and
workflow log rows must never change once flushed.  The workflow service
refuses these writes itself; these tests go straight to the ORM to prove
the listeners block code paths that bypass it.
"""

from datetime import date

import pytest
from sqlalchemy import event, select

from ledger_kernel.db.immutability import (
    _check_voucher_immutability,
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.models.voucher import Voucher, VoucherStatus
from ledger_kernel.models.workflow_log import VoucherWorkflowLog
from ledger_kernel.services.voucher_workflow import VoucherWorkflowService
from tests.builders import APPROVER, CHECKER, MAKER, TENANT_ID, cr, dr, journal


@pytest.fixture
def workflow(session, deterministic_clock):
    return VoucherWorkflowService(session, deterministic_clock)


@pytest.fixture
def make_voucher(workflow, session, chart):
    """Create a voucher and walk it to the requested status; returns the ORM row."""

    def _make(status: VoucherStatus) -> Voucher:
        record = workflow.create(
            TENANT_ID,
            journal(chart.branch_id, date(2024, 1, 5), dr(chart.bank, 100), cr(chart.sales, 100)),
            MAKER,
        )
        if status in (VoucherStatus.VERIFIED, VoucherStatus.APPROVED):
            workflow.verify(TENANT_ID, record.id, CHECKER)
        if status == VoucherStatus.APPROVED:
            workflow.approve(TENANT_ID, record.id, APPROVER)
        if status == VoucherStatus.REJECTED:
            workflow.reject(TENANT_ID, record.id, CHECKER, "wrong period")
        session.flush()
        return session.get(Voucher, record.id)

    return _make


class TestTerminalVoucher:
    @pytest.mark.parametrize("status", [VoucherStatus.APPROVED, VoucherStatus.REJECTED])
    def test_field_change_blocked(self, session, make_voucher, status):
        voucher = make_voucher(status)
        voucher.narration = "rewritten after the fact"

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "Voucher"
        assert "narration" in exc_info.value.reason

    def test_status_cannot_leave_terminal(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.REJECTED)
        voucher.status = VoucherStatus.DRAFT.value

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_audit_columns_may_change(self, session, make_voucher, deterministic_clock):
        voucher = make_voucher(VoucherStatus.APPROVED)
        voucher.updated_by = "auditor"
        voucher.updated_at = deterministic_clock.now()

        session.flush()

        assert voucher.updated_by == "auditor"

    def test_delete_blocked(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.APPROVED)
        session.delete(voucher)

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_block_is_logged(self, session, make_voucher, captured_logs):
        voucher = make_voucher(VoucherStatus.APPROVED)
        voucher.reference_no = "INV-9"

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked[0]["entity_type"] == "Voucher"
        assert blocked[0]["field"] == "reference_no"

    def test_transition_into_terminal_allowed(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.APPROVED)
        assert voucher.status == VoucherStatus.APPROVED


class TestVoucherDetails:
    def test_draft_lines_editable(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.DRAFT)
        voucher.details[0].narration = "fixed typo"

        session.flush()

    @pytest.mark.parametrize(
        "status", [VoucherStatus.VERIFIED, VoucherStatus.APPROVED, VoucherStatus.REJECTED]
    )
    def test_lines_frozen_after_draft(self, session, make_voucher, status):
        voucher = make_voucher(status)
        voucher.details[0].debit = 999

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "VoucherDetail"

    def test_line_delete_blocked_after_draft(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.VERIFIED)
        session.delete(voucher.details[0])

        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestWorkflowLog:
    def _first_row(self, session, voucher):
        return session.scalars(
            select(VoucherWorkflowLog)
            .where(VoucherWorkflowLog.voucher_id == voucher.id)
            .order_by(VoucherWorkflowLog.id)
        ).first()

    def test_update_blocked(self, session, make_voucher):
        row = self._first_row(session, make_voucher(VoucherStatus.DRAFT))
        row.comment = "edited"

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "VoucherWorkflowLog"

    def test_delete_blocked(self, session, make_voucher):
        row = self._first_row(session, make_voucher(VoucherStatus.DRAFT))
        session.delete(row)

        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestRegistration:
    def test_register_is_idempotent(self):
        register_immutability_listeners()
        register_immutability_listeners()

        assert event.contains(Voucher, "before_update", _check_voucher_immutability)

    def test_unregister_lifts_the_guard(self, session, make_voucher):
        voucher = make_voucher(VoucherStatus.APPROVED)
        unregister_immutability_listeners()
        try:
            assert not event.contains(Voucher, "before_update", _check_voucher_immutability)
            voucher.narration = "allowed without listeners"
            session.flush()
        finally:
            register_immutability_listeners()

        assert event.contains(Voucher, "before_update", _check_voucher_immutability)
