"""
Pure financial statement transformation functions.

These functions turn approved-line aggregates and account snapshots into
report DTOs.  ZERO I/O.  ZERO side effects.  Same inputs, same outputs.

All amounts are int minor units.  Statement amounts follow the natural
sign of the account type (ledger_kernel.domain.accounts.natural_balance):

    Asset, Expense                 debit - credit
    Liability, Equity, Revenue     credit - debit
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from enum import Enum

from ledger_kernel.domain.accounts import AccountInfo, natural_balance
from ledger_kernel.models.account import AccountType
from ledger_kernel.selectors.ledger_selector import AccountTotals, LedgerLineRow
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import (
    LedgerEntry,
    LedgerReport,
    ReportMetadata,
    StatementLine,
    StatementReport,
    StatementSection,
    TrialBalanceLine,
    TrialBalanceReport,
)

INCOME_STATEMENT_TITLE = "Income Statement"
BALANCE_SHEET_TITLE = "Balance Sheet"

REVENUE_SECTION = "Revenue"
EXPENSE_SECTION = "Expense"
ASSETS_SECTION = "Assets"
LIABILITIES_SECTION = "Liabilities"
EQUITY_SECTION = "Equity"

# Account id of synthetic statement lines; never a stored key
SYNTHETIC_ACCOUNT_ID = 0

_ZERO_TOTALS = (0, 0)


def _totals_for(totals: Mapping[int, AccountTotals], account_id: int) -> tuple[int, int]:
    row = totals.get(account_id)
    if row is None:
        return _ZERO_TOTALS
    return row.debit_total, row.credit_total


# =========================================================================
# 1. LEDGER
# =========================================================================


def build_ledger(
    account: AccountInfo,
    opening: AccountTotals,
    rows: Sequence[LedgerLineRow],
    from_date: date,
    to_date: date,
    metadata: ReportMetadata,
) -> LedgerReport:
    """
    Running-balance ledger for one account.

    ``rows`` must already be in (date, voucher number) order.  Each entry's
    running balance is the opening balance plus the partial sum of
    (debit - credit) up to and including that entry.
    """
    balance = opening.balance
    opening_balance = balance
    entries: list[LedgerEntry] = []
    for row in rows:
        balance += row.debit - row.credit
        entries.append(
            LedgerEntry(
                voucher_date=row.voucher_date,
                voucher_id=row.voucher_id,
                voucher_number=row.voucher_number,
                narration=row.narration or "",
                debit=row.debit,
                credit=row.credit,
                running_balance=balance,
            )
        )
    return LedgerReport(
        metadata=metadata,
        account_id=account.id,
        account_code=account.code,
        account_name=account.name,
        from_date=from_date,
        to_date=to_date,
        opening_balance=opening_balance,
        entries=tuple(entries),
        closing_balance=balance,
    )


# =========================================================================
# 2. TRIAL BALANCE
# =========================================================================


def build_trial_balance(
    accounts: Sequence[AccountInfo],
    totals: Mapping[int, AccountTotals],
    as_of_date: date,
    metadata: ReportMetadata,
) -> TrialBalanceReport:
    """
    Flat trial balance over the whole catalog.

    Accounts without activity appear with zero totals.  Debits and credits
    are summed separately, never netted.  No rollup into parents.  Rows keep
    the order of ``accounts`` (callers pass them sorted by code).
    """
    lines: list[TrialBalanceLine] = []
    for account in accounts:
        debit, credit = _totals_for(totals, account.id)
        lines.append(
            TrialBalanceLine(
                account_id=account.id,
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type.value,
                level=account.level,
                is_control_account=account.is_control_account,
                debit_total=debit,
                credit_total=credit,
                net_balance=debit - credit,
            )
        )
    total_debits = sum(line.debit_total for line in lines)
    total_credits = sum(line.credit_total for line in lines)
    return TrialBalanceReport(
        metadata=metadata,
        as_of_date=as_of_date,
        lines=tuple(lines),
        total_debits=total_debits,
        total_credits=total_credits,
        is_balanced=total_debits == total_credits,
    )


# =========================================================================
# 3. STATEMENTS
# =========================================================================


def _make_section(
    name: str,
    account_type: AccountType,
    accounts: Iterable[AccountInfo],
    totals: Mapping[int, AccountTotals],
    config: ReportingConfig,
) -> StatementSection:
    """Section of every account of one type, in natural sign."""
    lines: list[StatementLine] = []
    for account in accounts:
        if account.account_type != account_type:
            continue
        debit, credit = _totals_for(totals, account.id)
        amount = natural_balance(account_type, debit, credit)
        if amount == 0 and not config.include_zero_balances:
            continue
        lines.append(
            StatementLine(
                account_id=account.id,
                account_code=account.code,
                account_name=account.name,
                amount=amount,
            )
        )
    return StatementSection(
        name=name,
        lines=tuple(lines),
        total=sum(line.amount for line in lines),
    )


def compute_net_income(type_totals: Mapping[AccountType, tuple[int, int]]) -> int:
    """
    Revenue minus expense, from (debit, credit) totals per account type.

    Net income = (revenue credits - revenue debits)
               - (expense debits - expense credits)
    """
    rev_debit, rev_credit = type_totals.get(AccountType.REVENUE, _ZERO_TOTALS)
    exp_debit, exp_credit = type_totals.get(AccountType.EXPENSE, _ZERO_TOTALS)
    revenue = natural_balance(AccountType.REVENUE, rev_debit, rev_credit)
    expense = natural_balance(AccountType.EXPENSE, exp_debit, exp_credit)
    return revenue - expense


def build_income_statement(
    accounts: Sequence[AccountInfo],
    totals: Mapping[int, AccountTotals],
    from_date: date,
    to_date: date,
    config: ReportingConfig,
    metadata: ReportMetadata,
) -> StatementReport:
    """
    Revenue and Expense sections over a period.

    ``totals`` must cover approved lines dated within [from_date, to_date].
    Grand total is net income (negative for a loss).
    """
    revenue = _make_section(REVENUE_SECTION, AccountType.REVENUE, accounts, totals, config)
    expense = _make_section(EXPENSE_SECTION, AccountType.EXPENSE, accounts, totals, config)
    return StatementReport(
        metadata=metadata,
        title=INCOME_STATEMENT_TITLE,
        sections=(revenue, expense),
        grand_total=revenue.total - expense.total,
        from_date=from_date,
        to_date=to_date,
    )


def build_balance_sheet(
    accounts: Sequence[AccountInfo],
    totals: Mapping[int, AccountTotals],
    net_income: int,
    as_of_date: date,
    config: ReportingConfig,
    metadata: ReportMetadata,
) -> StatementReport:
    """
    Assets, Liabilities and Equity as of a date.

    ``totals`` must cover every approved line dated on or before as_of_date.
    ``net_income`` is cumulative revenue minus expense over the same
    history; when non-zero it is appended to Equity as a synthetic line
    (account id 0).  Grand total is assets - (liabilities + equity) and is
    zero for a balanced ledger.
    """
    assets = _make_section(ASSETS_SECTION, AccountType.ASSET, accounts, totals, config)
    liabilities = _make_section(
        LIABILITIES_SECTION, AccountType.LIABILITY, accounts, totals, config
    )
    equity = _make_section(EQUITY_SECTION, AccountType.EQUITY, accounts, totals, config)

    if net_income != 0:
        retained = StatementLine(
            account_id=SYNTHETIC_ACCOUNT_ID,
            account_code=config.retained_earnings_code,
            account_name=config.retained_earnings_label,
            amount=net_income,
        )
        equity = StatementSection(
            name=equity.name,
            lines=equity.lines + (retained,),
            total=equity.total + net_income,
        )

    return StatementReport(
        metadata=metadata,
        title=BALANCE_SHEET_TITLE,
        sections=(assets, liabilities, equity),
        grand_total=assets.total - (liabilities.total + equity.total),
        as_of_date=as_of_date,
    )


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain JSON-safe values.

    Handles:
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - int amounts and None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
