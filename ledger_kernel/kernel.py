"""
LedgerKernel -- the external interface of the ledger core.

Responsibility:
    One method per operation offered to the HTTP collaborator.  Each call is
    one unit of work: a fresh session, one transaction, commit on success,
    rollback on any exception.  A voucher change and its workflow log row
    therefore become visible together or not at all.

Architecture position:
    Outermost kernel layer.  Composes services (writes), selectors (voucher
    reads) and ledger_reporting (reports).

Error translation:
    - StaleDataError (optimistic version check lost to a concurrent writer)
      -> InvalidStateError carrying the status the winner wrote.
    - DBAPIError (connection loss, statement timeout, constraint failure)
      -> StoreError naming the operation.
    - LedgerKernelError subclasses propagate unchanged.
    The kernel never retries; only callers may retry StoreError.

Every call requires an explicit tenant_id.  A voucher or account of another
tenant is reported as not found.
"""

from collections.abc import Callable, Iterable
from contextlib import contextmanager
from datetime import date
from typing import Generator, Self, TypeVar
from uuid import uuid4

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from ledger_kernel.config import KernelConfig
from ledger_kernel.db.engine import (
    get_session_factory,
    init_engine_from_config,
    session_scope,
)
from ledger_kernel.db.immutability import register_immutability_listeners
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import VoucherInput, VoucherRecord, WorkflowLogRecord
from ledger_kernel.domain.workflow import PENDING_STATUSES, WorkflowAction
from ledger_kernel.exceptions import InvalidStateError, StoreError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.voucher import VoucherStatus
from ledger_kernel.selectors.voucher_selector import VoucherSelector
from ledger_kernel.services.voucher_workflow import VoucherWorkflowService
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import LedgerReport, StatementReport, TrialBalanceReport
from ledger_reporting.service import ReportingService

logger = get_logger("kernel")

T = TypeVar("T")


class LedgerKernel:
    """
    Voucher workflow and financial reports for many tenants.

    Usage:
        kernel = LedgerKernel.from_config(KernelConfig.from_env())
        voucher = kernel.create_voucher(data, actor="alice", tenant_id=1)
        kernel.verify_voucher(voucher.id, actor="bob", tenant_id=1)
        kernel.approve_voucher(voucher.id, actor="carol", tenant_id=1)
        tb = kernel.get_trial_balance(date(2024, 12, 31), tenant_id=1)

    Safe to share between threads: every call opens its own session.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
        config: KernelConfig | None = None,
        reporting_config: ReportingConfig | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._config = config or KernelConfig()
        self._reporting_config = reporting_config or ReportingConfig()
        register_immutability_listeners()

    @classmethod
    def from_config(
        cls,
        config: KernelConfig,
        clock: Clock | None = None,
        reporting_config: ReportingConfig | None = None,
    ) -> Self:
        """Initialize the engine from config and build a kernel on it."""
        init_engine_from_config(config)
        return cls(get_session_factory(), clock, config, reporting_config)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def _unit_of_work(
        self,
        operation: str,
        tenant_id: int,
        actor: str | None = None,
        voucher_id: int | None = None,
    ) -> Generator[Session, None, None]:
        correlation_id = LogContext.get_all().get("correlation_id") or uuid4().hex
        with LogContext.bind(
            correlation_id=correlation_id,
            tenant_id=tenant_id,
            actor=actor,
            voucher_id=voucher_id,
        ):
            try:
                with session_scope(self._session_factory) as session:
                    yield session
            except DBAPIError as exc:
                detail = str(getattr(exc, "orig", None) or exc)
                logger.error(
                    "store_operation_failed",
                    extra={"operation": operation},
                    exc_info=True,
                )
                raise StoreError(operation, detail) from exc

    def _workflow(self, session: Session) -> VoucherWorkflowService:
        return VoucherWorkflowService(
            session,
            self._clock,
            sequence_width=self._config.voucher_sequence_width,
        )

    def _guarded_write(
        self,
        action: WorkflowAction,
        tenant_id: int,
        voucher_id: int,
        actor: str,
        write: Callable[[VoucherWorkflowService], T],
    ) -> T:
        """
        Run a write on an existing voucher, mapping a lost race to
        InvalidStateError against the status now stored.
        """
        try:
            with self._unit_of_work(action.value, tenant_id, actor, voucher_id) as session:
                return write(self._workflow(session))
        except StaleDataError as exc:
            with self._unit_of_work("read_voucher_status", tenant_id, actor, voucher_id) as session:
                current = VoucherSelector(session).current_status(tenant_id, voucher_id)
            logger.warning(
                "voucher_transition_conflict",
                extra={
                    "action": action.value,
                    "current_status": current.value,
                },
            )
            raise InvalidStateError(voucher_id, current.value, action.value) from exc

    # ------------------------------------------------------------------
    # Voucher workflow
    # ------------------------------------------------------------------

    def create_voucher(
        self,
        data: VoucherInput,
        actor: str,
        *,
        tenant_id: int,
    ) -> VoucherRecord:
        """Create a DRAFT voucher.  ValidationError / NotFoundError on bad input."""
        with self._unit_of_work(WorkflowAction.CREATE.value, tenant_id, actor) as session:
            return self._workflow(session).create(tenant_id, data, actor)

    def update_voucher(
        self,
        voucher_id: int,
        data: VoucherInput,
        actor: str,
        *,
        tenant_id: int,
    ) -> VoucherRecord:
        """Replace header and lines of a DRAFT voucher."""
        return self._guarded_write(
            WorkflowAction.UPDATE, tenant_id, voucher_id, actor,
            lambda wf: wf.update(tenant_id, voucher_id, data, actor),
        )

    def verify_voucher(self, voucher_id: int, actor: str, *, tenant_id: int) -> VoucherRecord:
        """DRAFT -> VERIFIED."""
        return self._guarded_write(
            WorkflowAction.VERIFY, tenant_id, voucher_id, actor,
            lambda wf: wf.verify(tenant_id, voucher_id, actor),
        )

    def approve_voucher(self, voucher_id: int, actor: str, *, tenant_id: int) -> VoucherRecord:
        """VERIFIED -> APPROVED; the voucher starts counting in reports."""
        return self._guarded_write(
            WorkflowAction.APPROVE, tenant_id, voucher_id, actor,
            lambda wf: wf.approve(tenant_id, voucher_id, actor),
        )

    def reject_voucher(
        self,
        voucher_id: int,
        actor: str,
        comment: str,
        *,
        tenant_id: int,
    ) -> VoucherRecord:
        """DRAFT or VERIFIED -> REJECTED with a mandatory comment."""
        return self._guarded_write(
            WorkflowAction.REJECT, tenant_id, voucher_id, actor,
            lambda wf: wf.reject(tenant_id, voucher_id, actor, comment),
        )

    # ------------------------------------------------------------------
    # Voucher reads
    # ------------------------------------------------------------------

    def get_voucher(self, voucher_id: int, *, tenant_id: int) -> VoucherRecord:
        with self._unit_of_work("get_voucher", tenant_id, voucher_id=voucher_id) as session:
            return VoucherSelector(session).get_by_id_with_details(tenant_id, voucher_id)

    def list_vouchers(
        self,
        *,
        tenant_id: int,
        statuses: Iterable[VoucherStatus | str] | None = None,
    ) -> list[VoucherRecord]:
        """Vouchers newest first; ``statuses`` filters (None means all)."""
        with self._unit_of_work("list_vouchers", tenant_id) as session:
            return VoucherSelector(session).list_vouchers(tenant_id, statuses)

    def list_pending_vouchers(self, *, tenant_id: int) -> list[VoucherRecord]:
        """Vouchers waiting for verification or approval."""
        return self.list_vouchers(tenant_id=tenant_id, statuses=PENDING_STATUSES)

    def get_workflow_log(self, voucher_id: int, *, tenant_id: int) -> list[WorkflowLogRecord]:
        with self._unit_of_work("get_workflow_log", tenant_id, voucher_id=voucher_id) as session:
            return VoucherSelector(session).workflow_log(tenant_id, voucher_id)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def _reporting(self, session: Session) -> ReportingService:
        return ReportingService(session, self._clock, self._reporting_config)

    def get_ledger(
        self,
        account_id: int,
        from_date: date,
        to_date: date,
        *,
        tenant_id: int,
    ) -> LedgerReport:
        with self._unit_of_work("get_ledger", tenant_id) as session:
            return self._reporting(session).get_ledger(
                tenant_id, account_id, from_date, to_date
            )

    def get_trial_balance(self, as_of_date: date, *, tenant_id: int) -> TrialBalanceReport:
        with self._unit_of_work("get_trial_balance", tenant_id) as session:
            return self._reporting(session).get_trial_balance(tenant_id, as_of_date)

    def get_income_statement(
        self,
        from_date: date,
        to_date: date,
        *,
        tenant_id: int,
    ) -> StatementReport:
        with self._unit_of_work("get_income_statement", tenant_id) as session:
            return self._reporting(session).get_income_statement(
                tenant_id, from_date, to_date
            )

    def get_balance_sheet(self, as_of_date: date, *, tenant_id: int) -> StatementReport:
        with self._unit_of_work("get_balance_sheet", tenant_id) as session:
            return self._reporting(session).get_balance_sheet(tenant_id, as_of_date)
