"""
LedgerSelector: approved-line aggregation.

Only APPROVED vouchers contribute.  Draft, verified and rejected vouchers
are invisible to every aggregate.
"""

from datetime import date

import pytest

from ledger_kernel.models.account import AccountType
from ledger_kernel.selectors.ledger_selector import AccountTotals, LedgerSelector
from ledger_kernel.services.voucher_workflow import VoucherWorkflowService
from tests.builders import APPROVER, CHECKER, MAKER, OTHER_TENANT_ID, TENANT_ID, cr, dr, journal


@pytest.fixture
def workflow(session, deterministic_clock):
    return VoucherWorkflowService(session, deterministic_clock)


@pytest.fixture
def post(workflow):
    """Create a voucher and drive it to the requested status."""

    def _post(data, status="approved", tenant_id=TENANT_ID):
        record = workflow.create(tenant_id, data, MAKER)
        if status in ("verified", "approved"):
            workflow.verify(tenant_id, record.id, CHECKER)
        if status == "approved":
            workflow.approve(tenant_id, record.id, APPROVER)
        if status == "rejected":
            workflow.reject(tenant_id, record.id, CHECKER, "no")
        return record

    return _post


@pytest.fixture
def activity(post, chart):
    """
    Approved:  Jan 05  Dr Bank 500000 / Cr Share Capital 500000
               Feb 10  Dr Rent 20000   / Cr Bank 20000
               Mar 15  Dr Bank 70000   / Cr Sales 70000
    Not approved: one draft, one verified, one rejected (Bank 999 each)
    """
    post(journal(chart.branch_id, date(2024, 1, 5), dr(chart.bank, 500_000), cr(chart.share_capital, 500_000)))
    post(journal(chart.branch_id, date(2024, 2, 10), dr(chart.rent, 20_000), cr(chart.bank, 20_000)))
    post(journal(chart.branch_id, date(2024, 3, 15), dr(chart.bank, 70_000, narration="Cash sale"), cr(chart.sales, 70_000)))
    for status in ("draft", "verified", "rejected"):
        post(journal(chart.branch_id, date(2024, 2, 1), dr(chart.bank, 999), cr(chart.sales, 999)), status=status)


class TestAccountTotals:
    def test_only_approved_lines(self, session, chart, activity):
        totals = LedgerSelector(session).account_totals(TENANT_ID)

        assert totals[chart.bank] == AccountTotals(chart.bank, 570_000, 20_000)
        assert totals[chart.sales] == AccountTotals(chart.sales, 0, 70_000)
        assert totals[chart.bank].balance == 550_000
        assert chart.cash not in totals

    def test_date_bounds_inclusive(self, session, chart, activity):
        totals = LedgerSelector(session).account_totals(
            TENANT_ID, from_date=date(2024, 2, 10), to_date=date(2024, 3, 15)
        )
        assert totals[chart.bank] == AccountTotals(chart.bank, 70_000, 20_000)
        assert chart.share_capital not in totals

    def test_grand_totals_balance(self, session, chart, activity):
        debit, credit = LedgerSelector(session).total_debits_credits(TENANT_ID)
        assert debit == credit == 590_000

    def test_other_tenant_is_empty(self, session, chart, activity):
        selector = LedgerSelector(session)
        assert selector.account_totals(OTHER_TENANT_ID) == {}
        assert selector.total_debits_credits(OTHER_TENANT_ID) == (0, 0)


class TestTotalsByAccountType:
    def test_every_type_present(self, session, chart, activity):
        totals = LedgerSelector(session).totals_by_account_type(TENANT_ID)

        assert set(totals) == set(AccountType)
        assert totals[AccountType.ASSET] == (570_000, 20_000)
        assert totals[AccountType.EQUITY] == (0, 500_000)
        assert totals[AccountType.REVENUE] == (0, 70_000)
        assert totals[AccountType.EXPENSE] == (20_000, 0)
        assert totals[AccountType.LIABILITY] == (0, 0)

    def test_to_date(self, session, chart, activity):
        totals = LedgerSelector(session).totals_by_account_type(TENANT_ID, to_date=date(2024, 2, 28))
        assert totals[AccountType.REVENUE] == (0, 0)
        assert totals[AccountType.EXPENSE] == (20_000, 0)


class TestAccountLedger:
    def test_opening_totals_strictly_before(self, session, chart, activity):
        selector = LedgerSelector(session)

        assert selector.opening_totals(TENANT_ID, chart.bank, date(2024, 2, 10)) == AccountTotals(
            chart.bank, 500_000, 0
        )
        assert selector.opening_totals(TENANT_ID, chart.bank, date(2024, 1, 5)).balance == 0

    def test_lines_in_range_ordered(self, session, chart, activity):
        rows = LedgerSelector(session).account_lines(
            TENANT_ID, chart.bank, date(2024, 1, 1), date(2024, 12, 31)
        )

        assert [(r.voucher_date, r.debit, r.credit) for r in rows] == [
            (date(2024, 1, 5), 500_000, 0),
            (date(2024, 2, 10), 0, 20_000),
            (date(2024, 3, 15), 70_000, 0),
        ]

    def test_narration_falls_back_to_voucher(self, session, chart, post):
        post(journal(
            chart.branch_id, date(2024, 4, 1),
            dr(chart.cash, 5, narration="Till float"), cr(chart.bank, 5),
            narration="Petty cash top-up",
        ))
        selector = LedgerSelector(session)

        (cash_row,) = selector.account_lines(TENANT_ID, chart.cash, date(2024, 4, 1), date(2024, 4, 1))
        (bank_row,) = selector.account_lines(TENANT_ID, chart.bank, date(2024, 4, 1), date(2024, 4, 1))
        assert cash_row.narration == "Till float"
        assert bank_row.narration == "Petty cash top-up"
