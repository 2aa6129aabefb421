"""
Module: ledger_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the integer primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, services/, selectors/ or domain/.

Invariants enforced:
    - Integer surrogate keys starting at 1.  Zero is never a valid key, which
      lets reports use account_id=0 for synthetic lines.
    - Money is stored as BigInteger minor units (see db/types.py).  NEVER
      float, never Numeric.
    - Timestamps are timezone-aware.
"""

from datetime import date, datetime
from typing import ClassVar

from sqlalchemy import BigInteger, Date, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements a column declared exactly INTEGER PRIMARY KEY.
IdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all ledger models.

    Guarantees:
        - id is an autoincrementing integer primary key.
        - int maps to BigInteger (minor-unit money and counters).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        int: BigInteger,
        datetime: DateTime(timezone=True),
        date: Date,
        str: String(255),
    }

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)


class TrackedBase(Base):
    """
    Abstract base with audit timestamp and actor tracking.

    created_at/updated_at are normally written by services from the injected
    Clock; the server default only covers rows inserted outside the kernel.
    These columns are audit metadata, not financial data, so they may change
    on otherwise-immutable records.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    created_by: Mapped[str] = mapped_column(String(100), nullable=False)

    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
