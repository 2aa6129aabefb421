"""
Financial Reporting Service (``ledger_reporting.service``).

Responsibility
--------------
Loads account snapshots and approved-line aggregates through the kernel
selectors and hands them to the pure builders in ``statements.py``.  No
financial arithmetic lives here.

Architecture position
---------------------
Reporting layer, read-only.  Uses ``CatalogSelector`` and
``LedgerSelector``; never writes.  Every query is scoped by tenant id.

Failure modes
-------------
* ``AccountNotFoundError`` -- ledger requested for an unknown account or an
  account of another tenant.
* ``InvalidDateRangeError`` -- from_date after to_date.
* ``AccountHierarchyError`` -- the catalog violates its tree invariant.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from ledger_kernel.domain.accounts import AccountInfo, validate_account_hierarchy
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import InvalidDateRangeError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.catalog_selector import CatalogSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import (
    LedgerReport,
    ReportMetadata,
    ReportType,
    StatementReport,
    TrialBalanceReport,
)
from ledger_reporting.statements import (
    build_balance_sheet,
    build_income_statement,
    build_ledger,
    build_trial_balance,
    compute_net_income,
)

logger = get_logger("reporting.service")


class ReportingService:
    """
    Financial report generation.

    Contract
    --------
    * Every public method returns a frozen report DTO.
    * Only approved vouchers contribute to any figure.
    * Clock is injectable; it only stamps report metadata.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._catalog = CatalogSelector(session)
        self._ledger = LedgerSelector(session)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _load_accounts(self, tenant_id: int) -> list[AccountInfo]:
        accounts = self._catalog.list_accounts(tenant_id)
        if self._config.validate_hierarchy:
            validate_account_hierarchy(accounts)
        return accounts

    def _metadata(
        self,
        report_type: ReportType,
        tenant_id: int,
        as_of_date: date | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> ReportMetadata:
        return ReportMetadata(
            report_type=report_type,
            tenant_id=tenant_id,
            entity_name=self._config.entity_name,
            generated_at=self._clock.now().isoformat(),
            as_of_date=as_of_date,
            period_start=period_start,
            period_end=period_end,
        )

    @staticmethod
    def _check_range(from_date: date, to_date: date) -> None:
        if from_date > to_date:
            raise InvalidDateRangeError(from_date.isoformat(), to_date.isoformat())

    # =========================================================================
    # Public API
    # =========================================================================

    def get_ledger(
        self,
        tenant_id: int,
        account_id: int,
        from_date: date,
        to_date: date,
    ) -> LedgerReport:
        """
        Running-balance ledger of one account over [from_date, to_date].

        Opening balance sums approved lines dated before from_date.
        """
        self._check_range(from_date, to_date)
        account = self._catalog.get_account(tenant_id, account_id)
        opening = self._ledger.opening_totals(tenant_id, account_id, from_date)
        rows = self._ledger.account_lines(tenant_id, account_id, from_date, to_date)

        report = build_ledger(
            account,
            opening,
            rows,
            from_date,
            to_date,
            self._metadata(
                ReportType.LEDGER, tenant_id,
                period_start=from_date, period_end=to_date,
            ),
        )
        logger.info(
            "ledger_report_generated",
            extra={
                "account_id": account_id,
                "from_date": from_date.isoformat(),
                "to_date": to_date.isoformat(),
                "entry_count": len(report.entries),
                "opening_balance": report.opening_balance,
                "closing_balance": report.closing_balance,
            },
        )
        return report

    def get_trial_balance(self, tenant_id: int, as_of_date: date) -> TrialBalanceReport:
        """Debit and credit totals of every account as of a date."""
        accounts = self._load_accounts(tenant_id)
        totals = self._ledger.account_totals(tenant_id, to_date=as_of_date)

        report = build_trial_balance(
            accounts,
            totals,
            as_of_date,
            self._metadata(ReportType.TRIAL_BALANCE, tenant_id, as_of_date=as_of_date),
        )
        log = logger.info if report.is_balanced else logger.error
        log(
            "trial_balance_generated",
            extra={
                "as_of_date": as_of_date.isoformat(),
                "account_count": len(report.lines),
                "total_debits": report.total_debits,
                "total_credits": report.total_credits,
                "is_balanced": report.is_balanced,
            },
        )
        return report

    def get_income_statement(
        self,
        tenant_id: int,
        from_date: date,
        to_date: date,
    ) -> StatementReport:
        """Revenue and expense over a period; grand total is net income."""
        self._check_range(from_date, to_date)
        accounts = self._load_accounts(tenant_id)
        totals = self._ledger.account_totals(
            tenant_id, from_date=from_date, to_date=to_date
        )

        report = build_income_statement(
            accounts,
            totals,
            from_date,
            to_date,
            self._config,
            self._metadata(
                ReportType.INCOME_STATEMENT, tenant_id,
                period_start=from_date, period_end=to_date,
            ),
        )
        logger.info(
            "income_statement_generated",
            extra={
                "from_date": from_date.isoformat(),
                "to_date": to_date.isoformat(),
                "net_income": report.grand_total,
            },
        )
        return report

    def get_balance_sheet(self, tenant_id: int, as_of_date: date) -> StatementReport:
        """
        Assets, liabilities and equity as of a date.

        Net income since inception is summed independently, per account
        type, and shown as a synthetic equity line.
        """
        accounts = self._load_accounts(tenant_id)
        totals = self._ledger.account_totals(tenant_id, to_date=as_of_date)
        net_income = compute_net_income(
            self._ledger.totals_by_account_type(tenant_id, to_date=as_of_date)
        )

        report = build_balance_sheet(
            accounts,
            totals,
            net_income,
            as_of_date,
            self._config,
            self._metadata(ReportType.BALANCE_SHEET, tenant_id, as_of_date=as_of_date),
        )
        log = logger.info if report.grand_total == 0 else logger.error
        log(
            "balance_sheet_generated",
            extra={
                "as_of_date": as_of_date.isoformat(),
                "retained_earnings": net_income,
                "grand_total": report.grand_total,
            },
        )
        return report
