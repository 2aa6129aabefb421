"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Aggregation queries over approved voucher lines, the only
    input to every financial report.  There are no stored balances: every
    figure is summed from VoucherDetail rows at query time.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Approved-only visibility.  Every query here goes through
      _approved_lines(), which filters status = APPROVED.  Draft, verified
      and rejected vouchers contribute nothing to any report, for any date.
    - Deterministic ordering.  Ledger lines are ordered by
      (voucher_date, voucher_number, line_no).
    - Integer sums.  Totals are coerced to int (PostgreSQL returns NUMERIC
      for SUM(bigint)).
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import Select, func, select

from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.voucher import Voucher, VoucherDetail, VoucherStatus
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountTotals:
    """Debit and credit totals of one account, not netted."""

    account_id: int
    debit_total: int
    credit_total: int

    @property
    def balance(self) -> int:
        """Net balance (debits - credits)."""
        return self.debit_total - self.credit_total


@dataclass(frozen=True)
class LedgerLineRow:
    """One approved line of an account's ledger."""

    voucher_date: date
    voucher_id: int
    voucher_number: str
    line_no: int
    narration: str | None
    debit: int
    credit: int


class LedgerSelector(BaseSelector[VoucherDetail]):
    """Approved-line aggregation for one tenant at a time."""

    def _approved_lines(self, query: Select, tenant_id: int) -> Select:
        return (
            query.select_from(VoucherDetail)
            .join(Voucher, VoucherDetail.voucher_id == Voucher.id)
        ).where(
            Voucher.tenant_id == tenant_id,
            Voucher.status == VoucherStatus.APPROVED.value,
        )

    @staticmethod
    def _within(
        query: Select,
        from_date: date | None,
        to_date: date | None,
        before_date: date | None = None,
    ) -> Select:
        if from_date is not None:
            query = query.where(Voucher.voucher_date >= from_date)
        if to_date is not None:
            query = query.where(Voucher.voucher_date <= to_date)
        if before_date is not None:
            query = query.where(Voucher.voucher_date < before_date)
        return query

    def opening_totals(
        self,
        tenant_id: int,
        account_id: int,
        before_date: date,
    ) -> AccountTotals:
        """Totals of approved lines for an account dated strictly before a date."""
        query = self._approved_lines(
            select(
                func.coalesce(func.sum(VoucherDetail.debit), 0),
                func.coalesce(func.sum(VoucherDetail.credit), 0),
            ),
            tenant_id,
        ).where(VoucherDetail.account_id == account_id)
        query = self._within(query, None, None, before_date=before_date)
        debit, credit = self.session.execute(query).one()
        return AccountTotals(account_id, int(debit), int(credit))

    def account_lines(
        self,
        tenant_id: int,
        account_id: int,
        from_date: date,
        to_date: date,
    ) -> list[LedgerLineRow]:
        """
        Approved lines of one account in [from_date, to_date].

        Ordered by (voucher_date, voucher_number, line_no).  Numbers in one
        (branch, type) scope share a fixed sequence width, so string order
        is allocation order.  The line's narration falls back to the
        voucher's.
        """
        query = self._approved_lines(
            select(
                Voucher.voucher_date,
                Voucher.id,
                Voucher.voucher_number,
                VoucherDetail.line_no,
                func.coalesce(VoucherDetail.narration, Voucher.narration),
                VoucherDetail.debit,
                VoucherDetail.credit,
            ),
            tenant_id,
        ).where(VoucherDetail.account_id == account_id)
        query = self._within(query, from_date, to_date).order_by(
            Voucher.voucher_date,
            Voucher.voucher_number,
            VoucherDetail.line_no,
        )
        return [
            LedgerLineRow(
                voucher_date=row[0],
                voucher_id=row[1],
                voucher_number=row[2],
                line_no=row[3],
                narration=row[4],
                debit=int(row[5]),
                credit=int(row[6]),
            )
            for row in self.session.execute(query)
        ]

    def account_totals(
        self,
        tenant_id: int,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> dict[int, AccountTotals]:
        """
        Per-account debit and credit totals over approved lines.

        Only accounts with at least one line in range appear; callers merge
        with the catalog to show inactive accounts as zero.
        """
        query = self._approved_lines(
            select(
                VoucherDetail.account_id,
                func.coalesce(func.sum(VoucherDetail.debit), 0),
                func.coalesce(func.sum(VoucherDetail.credit), 0),
            ),
            tenant_id,
        )
        query = self._within(query, from_date, to_date).group_by(
            VoucherDetail.account_id
        )
        return {
            account_id: AccountTotals(account_id, int(debit), int(credit))
            for account_id, debit, credit in self.session.execute(query)
        }

    def totals_by_account_type(
        self,
        tenant_id: int,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> dict[AccountType, tuple[int, int]]:
        """(debit, credit) totals of approved lines grouped by account type."""
        query = self._approved_lines(
            select(
                Account.account_type,
                func.coalesce(func.sum(VoucherDetail.debit), 0),
                func.coalesce(func.sum(VoucherDetail.credit), 0),
            ),
            tenant_id,
        ).join(Account, VoucherDetail.account_id == Account.id)
        query = self._within(query, from_date, to_date).group_by(Account.account_type)
        totals = {t: (0, 0) for t in AccountType}
        for account_type, debit, credit in self.session.execute(query):
            totals[AccountType(account_type)] = (int(debit), int(credit))
        return totals

    def total_debits_credits(
        self,
        tenant_id: int,
        to_date: date | None = None,
    ) -> tuple[int, int]:
        """Grand (debit, credit) totals over approved lines; equal when balanced."""
        query = self._approved_lines(
            select(
                func.coalesce(func.sum(VoucherDetail.debit), 0),
                func.coalesce(func.sum(VoucherDetail.credit), 0),
            ),
            tenant_id,
        )
        debit, credit = self.session.execute(self._within(query, None, to_date)).one()
        return int(debit), int(credit)
