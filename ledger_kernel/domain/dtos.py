"""
DTOs -- voucher data crossing the kernel boundary.

Responsibility:
    Immutable inputs to the workflow engine (VoucherInput, VoucherLineInput)
    and the records it returns (VoucherRecord, VoucherLineRecord,
    WorkflowLogRecord).  Callers never receive ORM instances.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  from_model() converters are called
    only from selectors and services.

Amounts are int minor units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from ledger_kernel.models.voucher import VoucherStatus, VoucherType


@dataclass(frozen=True)
class VoucherLineInput:
    """One proposed debit or credit line."""

    account_id: int
    debit: int = 0
    credit: int = 0
    subsidiary_ledger_id: int | None = None
    narration: str | None = None


@dataclass(frozen=True)
class VoucherInput:
    """
    Header and lines for create/update.

    ``lines`` is kept in caller order; that order becomes line_no 1..n.
    """

    branch_id: int
    voucher_date: date
    voucher_type: VoucherType
    lines: tuple[VoucherLineInput, ...]
    narration: str | None = None
    reference_no: str | None = None
    attachment_ref: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "voucher_type", VoucherType(self.voucher_type))
        object.__setattr__(self, "lines", tuple(self.lines))

    @property
    def total_debits(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credits(self) -> int:
        return sum(line.credit for line in self.lines)


@dataclass(frozen=True)
class VoucherLineRecord:
    id: int
    line_no: int
    account_id: int
    subsidiary_ledger_id: int | None
    debit: int
    credit: int
    narration: str | None

    @classmethod
    def from_model(cls, detail) -> VoucherLineRecord:
        return cls(
            id=detail.id,
            line_no=detail.line_no,
            account_id=detail.account_id,
            subsidiary_ledger_id=detail.subsidiary_ledger_id,
            debit=detail.debit,
            credit=detail.credit,
            narration=detail.narration,
        )


@dataclass(frozen=True)
class VoucherRecord:
    """A persisted voucher with its lines, as returned to callers."""

    id: int
    tenant_id: int
    branch_id: int
    voucher_number: str
    voucher_type: VoucherType
    voucher_date: date
    status: VoucherStatus
    version: int
    narration: str | None
    reference_no: str | None
    attachment_ref: str | None
    created_by: str
    created_at: datetime
    verified_by: str | None = None
    verified_at: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    lines: tuple[VoucherLineRecord, ...] = field(default_factory=tuple)

    @property
    def total_debits(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credits(self) -> int:
        return sum(line.credit for line in self.lines)

    @classmethod
    def from_model(cls, voucher) -> VoucherRecord:
        return cls(
            id=voucher.id,
            tenant_id=voucher.tenant_id,
            branch_id=voucher.branch_id,
            voucher_number=voucher.voucher_number,
            voucher_type=VoucherType(voucher.voucher_type),
            voucher_date=voucher.voucher_date,
            status=VoucherStatus(voucher.status),
            version=voucher.version,
            narration=voucher.narration,
            reference_no=voucher.reference_no,
            attachment_ref=voucher.attachment_ref,
            created_by=voucher.created_by,
            created_at=voucher.created_at,
            verified_by=voucher.verified_by,
            verified_at=voucher.verified_at,
            approved_by=voucher.approved_by,
            approved_at=voucher.approved_at,
            rejected_by=voucher.rejected_by,
            rejected_at=voucher.rejected_at,
            rejection_reason=voucher.rejection_reason,
            lines=tuple(VoucherLineRecord.from_model(d) for d in voucher.details),
        )


@dataclass(frozen=True)
class WorkflowLogRecord:
    id: int
    voucher_id: int
    from_status: VoucherStatus
    to_status: VoucherStatus
    actor: str
    acted_at: datetime
    comment: str | None

    @classmethod
    def from_model(cls, row) -> WorkflowLogRecord:
        return cls(
            id=row.id,
            voucher_id=row.voucher_id,
            from_status=VoucherStatus(row.from_status),
            to_status=VoucherStatus(row.to_status),
            actor=row.actor,
            acted_at=row.acted_at,
            comment=row.comment,
        )
