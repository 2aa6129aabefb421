"""
BaseService -- abstract base for kernel write-side services.

Services receive a Session from the caller and persist with
``session.flush()``, never ``session.commit()`` or ``session.rollback()``.
The caller (LedgerKernel's unit of work, or a test) owns the transaction,
so a voucher change and its workflow log row commit or roll back together.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Holds the caller's session; subclasses flush, never commit."""

    def __init__(self, session: Session):
        self.session = session
