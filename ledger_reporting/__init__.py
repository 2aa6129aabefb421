"""
Financial reporting over approved vouchers.

Ledger, trial balance, income statement and balance sheet, built by pure
functions in ``statements`` from aggregates the kernel selectors compute.
"""

from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import (
    LedgerEntry,
    LedgerReport,
    ReportMetadata,
    ReportType,
    StatementLine,
    StatementReport,
    StatementSection,
    TrialBalanceLine,
    TrialBalanceReport,
)
from ledger_reporting.service import ReportingService
from ledger_reporting.statements import render_to_dict

__all__ = [
    "LedgerEntry",
    "LedgerReport",
    "ReportMetadata",
    "ReportType",
    "ReportingConfig",
    "ReportingService",
    "StatementLine",
    "StatementReport",
    "StatementSection",
    "TrialBalanceLine",
    "TrialBalanceReport",
    "render_to_dict",
]
