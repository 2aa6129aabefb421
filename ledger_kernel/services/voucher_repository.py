"""
VoucherRepository -- explicit persistence operations for vouchers.

The workflow engine is the only caller.  Each access pattern has its own
method instead of a generic repository with per-entity special cases:

    get_by_id_with_details   voucher + lines, optionally row-locked
    add                      insert a new voucher with its lines
    replace_details          delete-then-insert of the full line set
    append_log               insert one workflow log row

All methods flush; none commit.
"""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ledger_kernel.exceptions import VoucherNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.voucher import Voucher, VoucherDetail, VoucherStatus
from ledger_kernel.models.workflow_log import VoucherWorkflowLog
from ledger_kernel.services.base import BaseService

logger = get_logger("services.voucher_repository")


class VoucherRepository(BaseService[Voucher]):

    def get_by_id_with_details(
        self,
        tenant_id: int,
        voucher_id: int,
        for_update: bool = False,
    ) -> Voucher:
        """
        Load a voucher and its lines.

        With ``for_update`` the voucher row is read with SELECT ... FOR UPDATE
        (a no-op on SQLite) and any cached copy in the session is refreshed,
        so the status seen is the latest committed one.

        Raises:
            VoucherNotFoundError: unknown id, or a voucher of another tenant.
        """
        query = (
            select(Voucher)
            .options(selectinload(Voucher.details))
            .where(Voucher.id == voucher_id, Voucher.tenant_id == tenant_id)
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        voucher = self.session.scalars(query).one_or_none()
        if voucher is None:
            raise VoucherNotFoundError(voucher_id)
        return voucher

    def add(self, voucher: Voucher) -> Voucher:
        self.session.add(voucher)
        self.session.flush()
        return voucher

    def replace_details(
        self,
        voucher: Voucher,
        details: Sequence[VoucherDetail],
    ) -> None:
        """
        Replace every line of a draft voucher.

        Old lines are deleted and flushed before the new ones are inserted,
        so line numbers can be reused.
        """
        removed = len(voucher.details)
        voucher.details.clear()
        self.session.flush()
        voucher.details.extend(details)
        self.session.flush()
        logger.debug(
            "voucher_details_replaced",
            extra={"removed": removed, "inserted": len(details)},
        )

    def append_log(
        self,
        voucher: Voucher,
        from_status: VoucherStatus | str,
        to_status: VoucherStatus | str,
        actor: str,
        acted_at: datetime,
        comment: str | None = None,
    ) -> VoucherWorkflowLog:
        entry = VoucherWorkflowLog(
            tenant_id=voucher.tenant_id,
            voucher_id=voucher.id,
            from_status=VoucherStatus(from_status).value,
            to_status=VoucherStatus(to_status).value,
            actor=actor,
            acted_at=acted_at,
            comment=comment,
        )
        self.session.add(entry)
        self.session.flush()
        return entry
