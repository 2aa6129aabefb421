"""
VoucherWorkflowService -- the workflow engine and sole writer of vouchers.

Responsibility:
    Creates and edits draft vouchers and moves them through the status
    machine in domain/workflow.py, writing one workflow log row for every
    change in the same flush sequence as the change itself.

Architecture position:
    Kernel > Services -- imperative shell.  Flush-only; the caller's unit of
    work commits the voucher change and its log row together.

Invariants enforced:
    - Every voucher accepted by create/update has sum(debit) == sum(credit)
      exactly, at least one line, and valid subsidiary ledgers.
    - Only DRAFT vouchers are edited; verify needs DRAFT, approve needs
      VERIFIED, reject needs DRAFT or VERIFIED and a comment.  The status
      is checked first, so rejecting a terminal voucher without a comment
      is an InvalidStateError.
    - All preconditions are checked before the first write, so a failure
      leaves nothing behind.
    - Transitions lock the voucher row (FOR UPDATE) and are additionally
      guarded by the version column; the caller maps a lost race
      (StaleDataError) to InvalidStateError.

Failure modes:
    - ValidationError subclasses for bad lines or a missing comment.
    - NotFoundError subclasses for unknown voucher, branch, account or
      subsidiary ledger ids (including ids of another tenant).
    - InvalidStateError for a transition from a disallowed status.
"""

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import VoucherInput, VoucherRecord
from ledger_kernel.domain.validation import (
    validate_subsidiary_requirements,
    validate_voucher_lines,
)
from ledger_kernel.domain.workflow import (
    DEFAULT_LOG_COMMENTS,
    WorkflowAction,
    resolve_transition,
)
from ledger_kernel.exceptions import MissingCommentError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.voucher import Voucher, VoucherDetail, VoucherStatus
from ledger_kernel.selectors.catalog_selector import CatalogSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.sequence_service import (
    DEFAULT_SEQUENCE_WIDTH,
    VoucherNumberService,
)
from ledger_kernel.services.voucher_repository import VoucherRepository

logger = get_logger("services.workflow")


class VoucherWorkflowService(BaseService[Voucher]):
    """
    Create, update, verify, approve and reject vouchers.

    Usage:
        service = VoucherWorkflowService(session, clock)
        record = service.create(tenant_id, voucher_input, actor="alice")
        service.verify(tenant_id, record.id, actor="bob")
        service.approve(tenant_id, record.id, actor="carol")
        session.commit()   # caller owns the transaction
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        sequence_width: int = DEFAULT_SEQUENCE_WIDTH,
    ):
        super().__init__(session)
        self.clock = clock or SystemClock()
        self.catalog = CatalogSelector(session)
        self.repository = VoucherRepository(session)
        self.numbers = VoucherNumberService(session, sequence_width)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _validate_input(
        self,
        tenant_id: int,
        data: VoucherInput,
        voucher_id: int | None = None,
    ):
        """Run every create/update precondition; returns the branch snapshot."""
        validate_voucher_lines(data.lines, voucher_id)
        branch = self.catalog.get_branch(tenant_id, data.branch_id)
        accounts = self.catalog.get_accounts(
            tenant_id, {line.account_id for line in data.lines}
        )
        ledgers = self.catalog.get_subsidiary_ledgers(
            tenant_id,
            {
                line.subsidiary_ledger_id
                for line in data.lines
                if line.subsidiary_ledger_id is not None
            },
        )
        validate_subsidiary_requirements(data.lines, accounts, ledgers)
        return branch

    def _build_details(self, data: VoucherInput, actor: str) -> list[VoucherDetail]:
        now = self.clock.now()
        return [
            VoucherDetail(
                line_no=index,
                account_id=line.account_id,
                subsidiary_ledger_id=line.subsidiary_ledger_id,
                debit=line.debit,
                credit=line.credit,
                narration=line.narration,
                created_by=actor,
                created_at=now,
                updated_at=now,
            )
            for index, line in enumerate(data.lines, start=1)
        ]

    # ------------------------------------------------------------------
    # Draft operations
    # ------------------------------------------------------------------

    def create(self, tenant_id: int, data: VoucherInput, actor: str) -> VoucherRecord:
        """
        Create a DRAFT voucher with a freshly allocated voucher number.

        Writes a DRAFT -> DRAFT log row with comment "Created".
        """
        branch = self._validate_input(tenant_id, data)
        now = self.clock.now()

        voucher_number = self.numbers.next_voucher_number(
            tenant_id, branch, data.voucher_type, data.voucher_date
        )
        voucher = Voucher(
            tenant_id=tenant_id,
            branch_id=branch.id,
            voucher_number=voucher_number,
            voucher_type=data.voucher_type.value,
            voucher_date=data.voucher_date,
            reference_no=data.reference_no,
            narration=data.narration,
            attachment_ref=data.attachment_ref,
            status=VoucherStatus.DRAFT.value,
            created_by=actor,
            created_at=now,
            updated_at=now,
            details=self._build_details(data, actor),
        )
        self.repository.add(voucher)
        self.repository.append_log(
            voucher,
            VoucherStatus.DRAFT,
            VoucherStatus.DRAFT,
            actor,
            now,
            DEFAULT_LOG_COMMENTS[WorkflowAction.CREATE],
        )

        logger.info(
            "voucher_created",
            extra={
                "voucher_id": voucher.id,
                "voucher_number": voucher_number,
                "voucher_type": data.voucher_type.value,
                "line_count": len(data.lines),
                "total": data.total_debits,
            },
        )
        return VoucherRecord.from_model(voucher)

    def update(
        self,
        tenant_id: int,
        voucher_id: int,
        data: VoucherInput,
        actor: str,
    ) -> VoucherRecord:
        """
        Replace the header and all lines of a DRAFT voucher.

        The voucher number is kept.  Writes a DRAFT -> DRAFT log row with
        comment "Updated".
        """
        voucher = self.repository.get_by_id_with_details(
            tenant_id, voucher_id, for_update=True
        )
        status = resolve_transition(voucher_id, voucher.status, WorkflowAction.UPDATE)
        self._validate_input(tenant_id, data, voucher_id)
        now = self.clock.now()

        voucher.branch_id = data.branch_id
        voucher.voucher_type = data.voucher_type.value
        voucher.voucher_date = data.voucher_date
        voucher.reference_no = data.reference_no
        voucher.narration = data.narration
        voucher.attachment_ref = data.attachment_ref
        voucher.updated_by = actor
        voucher.updated_at = now
        self.repository.replace_details(voucher, self._build_details(data, actor))
        self.repository.append_log(
            voucher,
            status,
            status,
            actor,
            now,
            DEFAULT_LOG_COMMENTS[WorkflowAction.UPDATE],
        )

        logger.info(
            "voucher_updated",
            extra={
                "voucher_id": voucher.id,
                "voucher_number": voucher.voucher_number,
                "line_count": len(data.lines),
                "total": data.total_debits,
            },
        )
        return VoucherRecord.from_model(voucher)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def verify(self, tenant_id: int, voucher_id: int, actor: str) -> VoucherRecord:
        """DRAFT -> VERIFIED; stamps verified_by/verified_at."""
        return self._transition(tenant_id, voucher_id, actor, WorkflowAction.VERIFY)

    def approve(self, tenant_id: int, voucher_id: int, actor: str) -> VoucherRecord:
        """
        VERIFIED -> APPROVED; stamps approved_by/approved_at.

        From here on the voucher's lines count in every report.
        """
        return self._transition(tenant_id, voucher_id, actor, WorkflowAction.APPROVE)

    def reject(
        self,
        tenant_id: int,
        voucher_id: int,
        actor: str,
        comment: str,
    ) -> VoucherRecord:
        """DRAFT or VERIFIED -> REJECTED; the comment is required and logged."""
        return self._transition(
            tenant_id, voucher_id, actor, WorkflowAction.REJECT, comment
        )

    def _transition(
        self,
        tenant_id: int,
        voucher_id: int,
        actor: str,
        action: WorkflowAction,
        comment: str | None = None,
    ) -> VoucherRecord:
        voucher = self.repository.get_by_id_with_details(
            tenant_id, voucher_id, for_update=True
        )
        from_status = VoucherStatus(voucher.status)
        to_status = resolve_transition(voucher_id, from_status, action)

        if action == WorkflowAction.REJECT and not (comment and comment.strip()):
            raise MissingCommentError(voucher_id, action.value)

        now = self.clock.now()

        if to_status == VoucherStatus.VERIFIED:
            voucher.verified_by = actor
            voucher.verified_at = now
        elif to_status == VoucherStatus.APPROVED:
            voucher.approved_by = actor
            voucher.approved_at = now
        elif to_status == VoucherStatus.REJECTED:
            voucher.rejected_by = actor
            voucher.rejected_at = now
            voucher.rejection_reason = comment.strip()

        voucher.status = to_status.value
        voucher.updated_by = actor
        voucher.updated_at = now
        self.session.flush()

        self.repository.append_log(
            voucher,
            from_status,
            to_status,
            actor,
            now,
            comment.strip() if comment else DEFAULT_LOG_COMMENTS.get(action),
        )

        logger.info(
            "voucher_transitioned",
            extra={
                "voucher_id": voucher.id,
                "voucher_number": voucher.voucher_number,
                "action": action.value,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        return VoucherRecord.from_model(voucher)
