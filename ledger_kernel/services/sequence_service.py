"""
VoucherNumberService -- gap-safe, monotonic voucher numbering.

Responsibility:
    Allocates ``{type}-{branchCode}-{year}-{sequence}`` voucher numbers from a
    locked counter row per (tenant, branch, voucher type).  Counting existing
    vouchers and adding one is never used: two concurrent creators would
    read the same count.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Concurrency:
    ``SELECT ... FOR UPDATE`` on the counter row serializes allocations on
    PostgreSQL.  The first allocation for a scope inserts the counter inside
    a SAVEPOINT; if a concurrent transaction wins that insert, the savepoint
    is rolled back and the existing row is locked and incremented.

    A rolled-back transaction returns its number: the increment is part of
    the caller's transaction.

    Numbers never grow past ``sequence_width`` digits; the allocation that
    would need one more digit fails with VoucherSequenceExhaustedError.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.accounts import BranchInfo
from ledger_kernel.exceptions import VoucherSequenceExhaustedError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.sequence import VoucherSequence
from ledger_kernel.models.voucher import VoucherType
from ledger_kernel.services.base import BaseService

logger = get_logger("services.sequence")

DEFAULT_SEQUENCE_WIDTH = 6


def format_voucher_number(
    voucher_type: VoucherType | str,
    branch_code: str,
    year: int,
    sequence: int,
    width: int = DEFAULT_SEQUENCE_WIDTH,
) -> str:
    """
    format_voucher_number("Journal", "HQ", 2024, 7) -> 'Journal-HQ-2024-000007'

    Raises ValueError for a sequence below 1 or wider than width: ledgers
    order by voucher number as a string, so every number in a scope must
    have the same length.
    """
    if not 0 < sequence < 10**width:
        raise ValueError(f"sequence {sequence} does not fit in {width} digits")
    return f"{VoucherType(voucher_type).value}-{branch_code}-{year}-{sequence:0{width}d}"


class VoucherNumberService(BaseService[VoucherSequence]):
    """Locked-counter allocation of voucher numbers."""

    def __init__(self, session, sequence_width: int = DEFAULT_SEQUENCE_WIDTH):
        super().__init__(session)
        self.sequence_width = sequence_width

    def _locked_counter(
        self,
        tenant_id: int,
        branch_id: int,
        voucher_type: str,
    ) -> VoucherSequence | None:
        return self.session.execute(
            select(VoucherSequence)
            .where(
                VoucherSequence.tenant_id == tenant_id,
                VoucherSequence.branch_id == branch_id,
                VoucherSequence.voucher_type == voucher_type,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, tenant_id: int, branch_id: int, voucher_type: VoucherType | str) -> int:
        """
        Increment and return the counter for one scope.

        Postconditions:
            - Returns an int > 0, strictly greater than any value previously
              returned for the same scope in committed transactions.
            - The counter row stays locked until the caller's transaction ends.
        """
        type_value = VoucherType(voucher_type).value
        counter = self._locked_counter(tenant_id, branch_id, type_value)

        if counter is None:
            savepoint = self.session.begin_nested()
            try:
                counter = VoucherSequence(
                    tenant_id=tenant_id,
                    branch_id=branch_id,
                    voucher_type=type_value,
                    current_value=1,
                )
                self.session.add(counter)
                self.session.flush()
                savepoint.commit()
                logger.debug(
                    "voucher_sequence_allocated",
                    extra={"branch_id": branch_id, "voucher_type": type_value, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "voucher_sequence_counter_race_retry",
                    extra={"branch_id": branch_id, "voucher_type": type_value},
                )
                savepoint.rollback()
                counter = self._locked_counter(tenant_id, branch_id, type_value)
                if counter is None:
                    raise

        counter.current_value += 1
        self.session.flush()
        logger.debug(
            "voucher_sequence_allocated",
            extra={
                "branch_id": branch_id,
                "voucher_type": type_value,
                "value": counter.current_value,
            },
        )
        return counter.current_value

    def next_voucher_number(
        self,
        tenant_id: int,
        branch: BranchInfo,
        voucher_type: VoucherType | str,
        voucher_date: date,
    ) -> str:
        """Allocate the next number; the year comes from the voucher date."""
        type_value = VoucherType(voucher_type).value
        value = self.next_value(tenant_id, branch.id, type_value)
        if value >= 10**self.sequence_width:
            logger.error(
                "voucher_sequence_exhausted",
                extra={"branch_id": branch.id, "voucher_type": type_value, "value": value},
            )
            raise VoucherSequenceExhaustedError(
                branch.code, type_value, value, self.sequence_width
            )
        return format_voucher_number(
            voucher_type,
            branch.code,
            voucher_date.year,
            value,
            self.sequence_width,
        )

    def current_value(self, tenant_id: int, branch_id: int, voucher_type: VoucherType | str) -> int:
        """Last allocated value for a scope (0 if nothing allocated yet)."""
        value = self.session.scalars(
            select(VoucherSequence.current_value).where(
                VoucherSequence.tenant_id == tenant_id,
                VoucherSequence.branch_id == branch_id,
                VoucherSequence.voucher_type == VoucherType(voucher_type).value,
            )
        ).one_or_none()
        return value or 0
