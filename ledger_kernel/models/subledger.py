"""
Module: ledger_kernel.models.subledger
Responsibility: ORM persistence for subsidiary ledgers, the per-party
    sub-accounts (a customer, a vendor) posted under a control account.
Architecture position: Kernel > Models.  Read-only to the kernel.
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, IdType


class SubsidiaryLedger(Base):
    """
    A subsidiary ledger linked under one control account.

    Its subsidiary_type_id must match the type the control account requires,
    when the account requires one.
    """

    __tablename__ = "subsidiary_ledgers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_subsidiary_ledger_tenant_code"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    subsidiary_type_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("subsidiary_types.id"),
        nullable=False,
    )

    control_account_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("accounts.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SubsidiaryLedger {self.code}: {self.name}>"
