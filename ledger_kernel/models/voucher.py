"""
Module: ledger_kernel.models.voucher
Responsibility: ORM persistence for vouchers (double-entry journal entries)
    and their detail lines.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (tenant_id, voucher_number) is unique.
    - version is SQLAlchemy's version_id_col: every UPDATE is conditioned on
      the version read, so a concurrent writer fails with StaleDataError
      instead of overwriting (translated to InvalidStateError by the kernel).
    - Terminal vouchers (APPROVED, REJECTED) are immutable, and detail rows
      of a non-DRAFT voucher cannot change (db/immutability.py).
    - Only services/voucher_workflow.py writes these rows.

Amounts:
    debit and credit are non-negative BigInteger minor units.
"""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import IdType, TrackedBase
from ledger_kernel.db.types import MinorUnits


class VoucherStatus(str, Enum):
    """Voucher lifecycle status."""

    DRAFT = "draft"
    VERIFIED = "verified"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoucherType(str, Enum):
    """Voucher types; the value is the prefix of the voucher number."""

    JOURNAL = "Journal"
    PAYMENT = "Payment"
    RECEIPT = "Receipt"
    CONTRA = "Contra"


class Voucher(TrackedBase):
    """
    Voucher header.

    Owns an ordered list of VoucherDetail lines (line_no ascending).
    """

    __tablename__ = "vouchers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "voucher_number", name="uq_voucher_tenant_number"),
        Index("idx_voucher_tenant_status", "tenant_id", "status"),
        Index("idx_voucher_tenant_date", "tenant_id", "voucher_date"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False)

    branch_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("branches.id"),
        nullable=False,
    )

    voucher_number: Mapped[str] = mapped_column(String(50), nullable=False)

    voucher_type: Mapped[VoucherType] = mapped_column(String(20), nullable=False)

    voucher_date: Mapped[date] = mapped_column(Date, nullable=False)

    reference_no: Mapped[str | None] = mapped_column(String(100), nullable=True)

    narration: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    # Opaque reference to externally stored attachment
    attachment_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[VoucherStatus] = mapped_column(
        String(20),
        default=VoucherStatus.DRAFT.value,
        nullable=False,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    verified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    rejected_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    details: Mapped[list["VoucherDetail"]] = relationship(
        back_populates="voucher",
        cascade="all, delete-orphan",
        order_by="VoucherDetail.line_no",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Voucher {self.voucher_number} [{self.status}]>"

    @property
    def total_debits(self) -> int:
        return sum(d.debit for d in self.details)

    @property
    def total_credits(self) -> int:
        return sum(d.credit for d in self.details)

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


class VoucherDetail(TrackedBase):
    """A single debit or credit line of a voucher."""

    __tablename__ = "voucher_details"
    __table_args__ = (
        UniqueConstraint("voucher_id", "line_no", name="uq_voucher_detail_line"),
        CheckConstraint("debit >= 0", name="ck_voucher_detail_debit_nonneg"),
        CheckConstraint("credit >= 0", name="ck_voucher_detail_credit_nonneg"),
        Index("idx_voucher_detail_account", "account_id"),
    )

    voucher_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("vouchers.id", ondelete="CASCADE"),
        nullable=False,
    )

    line_no: Mapped[int] = mapped_column(Integer, nullable=False)

    account_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("accounts.id"),
        nullable=False,
    )

    subsidiary_ledger_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("subsidiary_ledgers.id"),
        nullable=True,
    )

    debit: Mapped[MinorUnits] = mapped_column(default=0, nullable=False)

    credit: Mapped[MinorUnits] = mapped_column(default=0, nullable=False)

    narration: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    voucher: Mapped[Voucher] = relationship(back_populates="details")

    def __repr__(self) -> str:
        return f"<VoucherDetail {self.line_no}: Dr {self.debit} Cr {self.credit}>"
