"""Branch catalog rows (read-only to the kernel; used for voucher numbering)."""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class Branch(Base):
    __tablename__ = "branches"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_branch_tenant_code"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)

    code: Mapped[str] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Branch {self.code}: {self.name}>"
