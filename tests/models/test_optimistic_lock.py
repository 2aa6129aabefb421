"""
Voucher.version is the mapper's version_id_col.

Every UPDATE carries "WHERE version = <read version>", so a writer working
from a stale read matches no row and SQLAlchemy raises StaleDataError.
"""

from datetime import date

import pytest
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from ledger_kernel.models.voucher import Voucher
from ledger_kernel.services.voucher_workflow import VoucherWorkflowService
from tests.builders import CHECKER, MAKER, TENANT_ID, cr, dr, journal


@pytest.fixture
def workflow(session, deterministic_clock):
    return VoucherWorkflowService(session, deterministic_clock)


@pytest.fixture
def voucher(workflow, session, chart) -> Voucher:
    record = workflow.create(
        TENANT_ID,
        journal(chart.branch_id, date(2024, 1, 5), dr(chart.cash, 10), cr(chart.sales, 10)),
        MAKER,
    )
    session.flush()
    return session.get(Voucher, record.id)


class TestVersionColumn:
    def test_new_voucher_starts_at_one(self, voucher):
        assert voucher.version == 1

    def test_every_update_increments(self, session, workflow, voucher):
        workflow.verify(TENANT_ID, voucher.id, CHECKER)
        session.flush()
        assert voucher.version == 2

        voucher.updated_by = CHECKER
        session.flush()
        assert voucher.version == 3

    def test_stale_write_rejected(self, session, voucher):
        session.execute(
            text("UPDATE vouchers SET version = version + 1 WHERE id = :id"),
            {"id": voucher.id},
        )
        voucher.narration = "based on an old read"

        with pytest.raises(StaleDataError):
            session.flush()

