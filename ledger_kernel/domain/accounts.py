"""
Account catalog snapshots and sign conventions.

Responsibility:
    Frozen snapshots of the read-only catalog (accounts, subsidiary ledgers,
    branches) and the normal-balance rules every report applies.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Selectors convert
    ORM rows to these snapshots; services and reporting consume them.

Sign convention:

    | Account type | Normal balance | Reported amount |
    |--------------|----------------|-----------------|
    | Asset        | Debit          | debit - credit  |
    | Expense      | Debit          | debit - credit  |
    | Liability    | Credit         | credit - debit  |
    | Equity       | Credit         | credit - debit  |
    | Revenue      | Credit         | credit - debit  |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ledger_kernel.exceptions import AccountHierarchyError
from ledger_kernel.models.account import AccountType, NormalBalance

NORMAL_BALANCE_BY_TYPE: dict[AccountType, NormalBalance] = {
    AccountType.ASSET: NormalBalance.DEBIT,
    AccountType.EXPENSE: NormalBalance.DEBIT,
    AccountType.LIABILITY: NormalBalance.CREDIT,
    AccountType.EQUITY: NormalBalance.CREDIT,
    AccountType.REVENUE: NormalBalance.CREDIT,
}


def normal_balance_for(account_type: AccountType | str) -> NormalBalance:
    return NORMAL_BALANCE_BY_TYPE[AccountType(account_type)]


def natural_balance(account_type: AccountType | str, debit: int, credit: int) -> int:
    """
    Balance of an account in its natural sign.

    Positive means the account sits on its normal side: a debit balance for
    assets and expenses, a credit balance for liabilities, equity and revenue.
    """
    if normal_balance_for(account_type) == NormalBalance.DEBIT:
        return debit - credit
    return credit - debit


@dataclass(frozen=True)
class AccountInfo:
    """Snapshot of one chart-of-accounts row."""

    id: int
    code: str
    name: str
    account_type: AccountType
    level: int = 1
    parent_id: int | None = None
    is_control_account: bool = False
    required_subsidiary_type_id: int | None = None

    @property
    def normal_balance(self) -> NormalBalance:
        return normal_balance_for(self.account_type)

    @classmethod
    def from_model(cls, account) -> AccountInfo:
        return cls(
            id=account.id,
            code=account.code,
            name=account.name,
            account_type=AccountType(account.account_type),
            level=account.level,
            parent_id=account.parent_id,
            is_control_account=account.is_control_account,
            required_subsidiary_type_id=account.required_subsidiary_type_id,
        )


@dataclass(frozen=True)
class SubsidiaryLedgerInfo:
    """Snapshot of one subsidiary ledger."""

    id: int
    code: str
    name: str
    subsidiary_type_id: int
    control_account_id: int

    @classmethod
    def from_model(cls, ledger) -> SubsidiaryLedgerInfo:
        return cls(
            id=ledger.id,
            code=ledger.code,
            name=ledger.name,
            subsidiary_type_id=ledger.subsidiary_type_id,
            control_account_id=ledger.control_account_id,
        )


@dataclass(frozen=True)
class BranchInfo:
    id: int
    tenant_id: int
    code: str
    name: str

    @classmethod
    def from_model(cls, branch) -> BranchInfo:
        return cls(
            id=branch.id,
            tenant_id=branch.tenant_id,
            code=branch.code,
            name=branch.name,
        )


def sort_key_for_code(code: str) -> tuple:
    """
    Lexicographic-numeric ordering for account codes.

    Numeric runs compare by value, so "2" sorts before "10" and "1000"
    before "1000-01"; ties fall back to the raw code.
    """
    parts: list[tuple[int, int | str]] = []
    run = ""
    for ch in code:
        if ch.isdigit():
            run += ch
            continue
        if run:
            parts.append((0, int(run)))
            run = ""
        parts.append((1, ch))
    if run:
        parts.append((0, int(run)))
    return (tuple(parts), code)


def validate_account_hierarchy(accounts: Iterable[AccountInfo]) -> None:
    """
    Check the tree invariants of a tenant's chart of accounts.

    Raises:
        AccountHierarchyError: a parent id is unknown, or following parent
            links from some account revisits an account.
    """
    by_id = {a.id: a for a in accounts}

    for account in by_id.values():
        if account.parent_id is not None and account.parent_id not in by_id:
            raise AccountHierarchyError(
                account.id, f"parent {account.parent_id} does not exist"
            )

    # Accounts already proven to reach a root
    rooted: set[int] = set()
    for account in by_id.values():
        path: list[int] = []
        on_path: set[int] = set()
        current: AccountInfo | None = account
        while current is not None and current.id not in rooted:
            if current.id in on_path:
                raise AccountHierarchyError(
                    account.id, "cycle in parent chain"
                )
            path.append(current.id)
            on_path.add(current.id)
            current = by_id.get(current.parent_id) if current.parent_id is not None else None
        rooted.update(path)
