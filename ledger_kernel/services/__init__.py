"""Write-side services (flush-only; the caller owns the transaction)."""

from ledger_kernel.services.sequence_service import (
    VoucherNumberService,
    format_voucher_number,
)
from ledger_kernel.services.voucher_repository import VoucherRepository
from ledger_kernel.services.voucher_workflow import VoucherWorkflowService

__all__ = [
    "VoucherNumberService",
    "VoucherRepository",
    "VoucherWorkflowService",
    "format_voucher_number",
]
