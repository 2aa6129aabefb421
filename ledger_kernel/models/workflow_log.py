"""
Module: ledger_kernel.models.workflow_log
Responsibility: Append-only audit trail of voucher status transitions.
Architecture position: Kernel > Models.

Rows are written in the same transaction as the voucher change they record
and are never updated or deleted (db/immutability.py rejects both).
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, IdType


class VoucherWorkflowLog(Base):
    """One voucher status transition (from_status may equal to_status)."""

    __tablename__ = "voucher_workflow_logs"
    __table_args__ = (
        Index("idx_workflow_log_voucher", "voucher_id", "id"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False)

    voucher_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("vouchers.id"),
        nullable=False,
    )

    from_status: Mapped[str] = mapped_column(String(20), nullable=False)

    to_status: Mapped[str] = mapped_column(String(20), nullable=False)

    actor: Mapped[str] = mapped_column(String(100), nullable=False)

    acted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    comment: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<VoucherWorkflowLog voucher={self.voucher_id} "
            f"{self.from_status}->{self.to_status}>"
        )
