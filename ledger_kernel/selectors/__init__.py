"""Read-only selectors (catalog, vouchers, approved-line aggregation)."""

from ledger_kernel.selectors.catalog_selector import CatalogSelector
from ledger_kernel.selectors.ledger_selector import (
    AccountTotals,
    LedgerLineRow,
    LedgerSelector,
)
from ledger_kernel.selectors.voucher_selector import VoucherSelector

__all__ = [
    "AccountTotals",
    "CatalogSelector",
    "LedgerLineRow",
    "LedgerSelector",
    "VoucherSelector",
]
