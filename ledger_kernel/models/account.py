"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the chart of accounts and the subsidiary
    types an account may require on every posting.
Architecture position: Kernel > Models.  May import from db/base.py only.

The catalog tables are maintained by an external administration surface.
The kernel reads them (selectors/catalog_selector.py) and never writes them.

Invariants (checked by domain/accounts.validate_account_hierarchy):
    - code is unique per tenant.
    - every non-root account has a parent that exists in the same tenant.
    - the parent chain has no cycles.
"""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, IdType


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Side on which an account type's balance is conventionally positive."""

    DEBIT = "debit"
    CREDIT = "credit"


class SubsidiaryType(Base):
    """A kind of subsidiary ledger (Customer, Vendor, Employee, ...)."""

    __tablename__ = "subsidiary_types"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_subsidiary_type_name"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<SubsidiaryType {self.id}: {self.name}>"


class Account(Base):
    """
    Chart of accounts entry.

    Guarantees:
        - (tenant_id, code) is unique.
        - account_type is one of ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE.
        - required_subsidiary_type_id, when set, forces every posting to
          this account to name a subsidiary ledger of that type.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_account_tenant_code"),
        Index("idx_account_tenant_type", "tenant_id", "account_type"),
    )

    tenant_id: Mapped[int] = mapped_column(nullable=False)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(String(20), nullable=False)

    # Depth in the tree, 1 for roots
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    parent_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("accounts.id"),
        nullable=True,
    )

    is_control_account: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    required_subsidiary_type_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("subsidiary_types.id"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"
