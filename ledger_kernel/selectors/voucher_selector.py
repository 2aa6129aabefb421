"""
Module: ledger_kernel.selectors.voucher_selector
Responsibility: Read-only voucher queries: one voucher with its lines, the
    tenant's voucher list (newest first, optional status filter) and the
    workflow audit trail.
Architecture position: Kernel > Selectors.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ledger_kernel.domain.dtos import VoucherRecord, WorkflowLogRecord
from ledger_kernel.exceptions import VoucherNotFoundError
from ledger_kernel.models.voucher import Voucher, VoucherStatus
from ledger_kernel.models.workflow_log import VoucherWorkflowLog
from ledger_kernel.selectors.base import BaseSelector


class VoucherSelector(BaseSelector[Voucher]):

    def get_by_id_with_details(self, tenant_id: int, voucher_id: int) -> VoucherRecord:
        """
        Load one voucher and its lines.

        Raises:
            VoucherNotFoundError: unknown id, or a voucher of another tenant.
        """
        voucher = self.session.scalars(
            select(Voucher)
            .options(selectinload(Voucher.details))
            .where(Voucher.id == voucher_id, Voucher.tenant_id == tenant_id)
        ).one_or_none()
        if voucher is None:
            raise VoucherNotFoundError(voucher_id)
        return VoucherRecord.from_model(voucher)

    def list_vouchers(
        self,
        tenant_id: int,
        statuses: Iterable[VoucherStatus | str] | None = None,
    ) -> list[VoucherRecord]:
        """Vouchers of a tenant ordered by date desc, then number desc."""
        query = (
            select(Voucher)
            .options(selectinload(Voucher.details))
            .where(Voucher.tenant_id == tenant_id)
        )
        if statuses is not None:
            values = sorted({VoucherStatus(s).value for s in statuses})
            query = query.where(Voucher.status.in_(values))
        query = query.order_by(
            Voucher.voucher_date.desc(),
            Voucher.voucher_number.desc(),
        )
        return [VoucherRecord.from_model(v) for v in self.session.scalars(query)]

    def current_status(self, tenant_id: int, voucher_id: int) -> VoucherStatus:
        status = self.session.scalars(
            select(Voucher.status).where(
                Voucher.id == voucher_id,
                Voucher.tenant_id == tenant_id,
            )
        ).one_or_none()
        if status is None:
            raise VoucherNotFoundError(voucher_id)
        return VoucherStatus(status)

    def workflow_log(self, tenant_id: int, voucher_id: int) -> list[WorkflowLogRecord]:
        """Audit trail of one voucher in append order."""
        # Raises for unknown / foreign vouchers
        self.current_status(tenant_id, voucher_id)
        rows = self.session.scalars(
            select(VoucherWorkflowLog)
            .where(
                VoucherWorkflowLog.voucher_id == voucher_id,
                VoucherWorkflowLog.tenant_id == tenant_id,
            )
            .order_by(VoucherWorkflowLog.id)
        ).all()
        return [WorkflowLogRecord.from_model(row) for row in rows]
