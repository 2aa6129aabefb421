"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import (
    Account,
    AccountType,
    NormalBalance,
    SubsidiaryType,
)
from ledger_kernel.models.branch import Branch
from ledger_kernel.models.sequence import VoucherSequence
from ledger_kernel.models.subledger import SubsidiaryLedger
from ledger_kernel.models.voucher import (
    Voucher,
    VoucherDetail,
    VoucherStatus,
    VoucherType,
)
from ledger_kernel.models.workflow_log import VoucherWorkflowLog

__all__ = [
    "Account",
    "AccountType",
    "Branch",
    "NormalBalance",
    "SubsidiaryLedger",
    "SubsidiaryType",
    "Voucher",
    "VoucherDetail",
    "VoucherSequence",
    "VoucherStatus",
    "VoucherType",
    "VoucherWorkflowLog",
]
