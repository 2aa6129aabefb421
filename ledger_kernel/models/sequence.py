"""
Module: ledger_kernel.models.sequence
Responsibility: Counter rows backing voucher-number allocation.
Architecture position: Kernel > Models.  Written only by
    services/sequence_service.py under a row lock.
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, IdType


class VoucherSequence(Base):
    """Last allocated sequence value for one (tenant, branch, voucher type)."""

    __tablename__ = "voucher_sequences"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "branch_id", "voucher_type",
            name="uq_voucher_sequence_scope",
        ),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False)

    branch_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("branches.id"),
        nullable=False,
    )

    voucher_type: Mapped[str] = mapped_column(String(20), nullable=False)

    current_value: Mapped[int] = mapped_column(default=0, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<VoucherSequence {self.tenant_id}/{self.branch_id}/"
            f"{self.voucher_type}: {self.current_value}>"
        )
