"""
Test data builders shared by the suite.

Catalog rows are written by CatalogBuilder (the kernel itself never writes
the catalog).  journal()/dr()/cr() keep voucher inputs short in tests.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.dtos import VoucherInput, VoucherLineInput
from ledger_kernel.models.account import Account, AccountType, SubsidiaryType
from ledger_kernel.models.branch import Branch
from ledger_kernel.models.subledger import SubsidiaryLedger
from ledger_kernel.models.voucher import VoucherType

TENANT_ID = 1
OTHER_TENANT_ID = 2

MAKER = "maker"
CHECKER = "checker"
APPROVER = "approver"


class CatalogBuilder:
    """Inserts catalog rows, each in its own committed transaction."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._factory = session_factory

    def _insert(self, row) -> int:
        with session_scope(self._factory) as session:
            session.add(row)
            session.flush()
            return row.id

    def branch(self, code: str = "HQ", name: str = "Head Office", tenant_id: int = TENANT_ID) -> int:
        return self._insert(Branch(tenant_id=tenant_id, code=code, name=name))

    def subsidiary_type(self, name: str, tenant_id: int = TENANT_ID) -> int:
        return self._insert(SubsidiaryType(tenant_id=tenant_id, name=name))

    def account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        *,
        tenant_id: int = TENANT_ID,
        parent_id: int | None = None,
        level: int = 1,
        is_control_account: bool = False,
        required_subsidiary_type_id: int | None = None,
        is_active: bool = True,
    ) -> int:
        return self._insert(
            Account(
                tenant_id=tenant_id,
                code=code,
                name=name,
                account_type=account_type.value,
                parent_id=parent_id,
                level=level,
                is_control_account=is_control_account,
                required_subsidiary_type_id=required_subsidiary_type_id,
                is_active=is_active,
            )
        )

    def subsidiary_ledger(
        self,
        code: str,
        name: str,
        subsidiary_type_id: int,
        control_account_id: int,
        tenant_id: int = TENANT_ID,
    ) -> int:
        return self._insert(
            SubsidiaryLedger(
                tenant_id=tenant_id,
                code=code,
                name=name,
                subsidiary_type_id=subsidiary_type_id,
                control_account_id=control_account_id,
            )
        )


@dataclass(frozen=True)
class StandardChart:
    """Ids of the standard test chart of accounts for TENANT_ID."""

    branch_id: int
    cash: int
    bank: int
    receivables: int
    payables: int
    share_capital: int
    sales: int
    rent: int
    customer_type: int
    vendor_type: int
    customer: int
    vendor: int


def build_standard_chart(catalog: CatalogBuilder) -> StandardChart:
    """
    Small chart with one control account per subsidiary type.

        1000 Cash, 1100 Bank                     asset
        1200 Accounts Receivable (Customer)      asset, control
        2000 Accounts Payable (Vendor)           liability, control
        3000 Share Capital                       equity
        4000 Sales                               revenue
        5000 Rent Expense                        expense
    """
    branch_id = catalog.branch("HQ", "Head Office")
    customer_type = catalog.subsidiary_type("Customer")
    vendor_type = catalog.subsidiary_type("Vendor")

    cash = catalog.account("1000", "Cash", AccountType.ASSET)
    bank = catalog.account("1100", "Bank", AccountType.ASSET)
    receivables = catalog.account(
        "1200", "Accounts Receivable", AccountType.ASSET,
        is_control_account=True, required_subsidiary_type_id=customer_type,
    )
    payables = catalog.account(
        "2000", "Accounts Payable", AccountType.LIABILITY,
        is_control_account=True, required_subsidiary_type_id=vendor_type,
    )
    share_capital = catalog.account("3000", "Share Capital", AccountType.EQUITY)
    sales = catalog.account("4000", "Sales", AccountType.REVENUE)
    rent = catalog.account("5000", "Rent Expense", AccountType.EXPENSE)

    customer = catalog.subsidiary_ledger("C-001", "Acme Ltd", customer_type, receivables)
    vendor = catalog.subsidiary_ledger("V-001", "Landlord Inc", vendor_type, payables)

    return StandardChart(
        branch_id=branch_id,
        cash=cash,
        bank=bank,
        receivables=receivables,
        payables=payables,
        share_capital=share_capital,
        sales=sales,
        rent=rent,
        customer_type=customer_type,
        vendor_type=vendor_type,
        customer=customer,
        vendor=vendor,
    )


# =============================================================================
# Voucher inputs
# =============================================================================


def journal(
    branch_id: int,
    voucher_date: date,
    *lines: VoucherLineInput,
    voucher_type: VoucherType = VoucherType.JOURNAL,
    narration: str | None = None,
) -> VoucherInput:
    return VoucherInput(
        branch_id=branch_id,
        voucher_date=voucher_date,
        voucher_type=voucher_type,
        lines=lines,
        narration=narration,
    )


def dr(
    account_id: int,
    amount: int,
    subsidiary_ledger_id: int | None = None,
    narration: str | None = None,
) -> VoucherLineInput:
    return VoucherLineInput(
        account_id=account_id,
        debit=amount,
        subsidiary_ledger_id=subsidiary_ledger_id,
        narration=narration,
    )


def cr(
    account_id: int,
    amount: int,
    subsidiary_ledger_id: int | None = None,
    narration: str | None = None,
) -> VoucherLineInput:
    return VoucherLineInput(
        account_id=account_id,
        credit=amount,
        subsidiary_ledger_id=subsidiary_ledger_id,
        narration=narration,
    )


# =============================================================================
# Concurrency
# =============================================================================


def run_together(fn, count: int) -> list:
    """Start count calls of fn(i) at the same instant; return result or exception per call."""
    barrier = threading.Barrier(count)

    def _call(i):
        barrier.wait()
        try:
            return fn(i)
        except Exception as exc:  # collected for assertions
            return exc

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(_call, range(count)))
