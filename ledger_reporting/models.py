"""
Financial Reporting Domain Models (``ledger_reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for report outputs: account ledger, trial
balance, and the section-based income statement and balance sheet.

Architecture position
---------------------
Pure data definitions with ZERO I/O, returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields are ``int`` minor units.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ReportType(str, Enum):
    """Types of financial reports."""

    LEDGER = "ledger"
    TRIAL_BALANCE = "trial_balance"
    INCOME_STATEMENT = "income_statement"
    BALANCE_SHEET = "balance_sheet"


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every report."""

    report_type: ReportType
    tenant_id: int
    entity_name: str
    generated_at: str  # ISO timestamp from the injected clock
    as_of_date: date | None = None
    period_start: date | None = None
    period_end: date | None = None


# =========================================================================
# Ledger
# =========================================================================


@dataclass(frozen=True)
class LedgerEntry:
    """One approved line with the running balance after it."""

    voucher_date: date
    voucher_id: int
    voucher_number: str
    narration: str
    debit: int
    credit: int
    running_balance: int


@dataclass(frozen=True)
class LedgerReport:
    """
    Running-balance statement of one account.

    Balances are debit - credit regardless of account type.
    """

    metadata: ReportMetadata
    account_id: int
    account_code: str
    account_name: str
    from_date: date
    to_date: date
    opening_balance: int
    entries: tuple[LedgerEntry, ...]
    closing_balance: int

    @property
    def total_debits(self) -> int:
        return sum(e.debit for e in self.entries)

    @property
    def total_credits(self) -> int:
        return sum(e.credit for e in self.entries)


# =========================================================================
# Trial Balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceLine:
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    level: int
    is_control_account: bool
    debit_total: int
    credit_total: int
    net_balance: int  # debit_total - credit_total


@dataclass(frozen=True)
class TrialBalanceReport:
    """All accounts of the catalog, active or not, ordered by code."""

    metadata: ReportMetadata
    as_of_date: date
    lines: tuple[TrialBalanceLine, ...]
    total_debits: int
    total_credits: int
    is_balanced: bool


# =========================================================================
# Statements
# =========================================================================


@dataclass(frozen=True)
class StatementLine:
    """An account's amount in its natural sign; account_id 0 is synthetic."""

    account_id: int
    account_code: str
    account_name: str
    amount: int


@dataclass(frozen=True)
class StatementSection:
    name: str
    lines: tuple[StatementLine, ...]
    total: int


@dataclass(frozen=True)
class StatementReport:
    """
    Income statement or balance sheet.

    grand_total is net income for the income statement and
    assets - (liabilities + equity) for the balance sheet (zero when the
    ledger balances).
    """

    metadata: ReportMetadata
    title: str
    sections: tuple[StatementSection, ...]
    grand_total: int
    as_of_date: date | None = None
    from_date: date | None = None
    to_date: date | None = None

    def section(self, name: str) -> StatementSection:
        for section in self.sections:
            if section.name == name:
                return section
        raise KeyError(name)
