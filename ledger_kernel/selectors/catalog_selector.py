"""
Module: ledger_kernel.selectors.catalog_selector
Responsibility: Tenant-scoped lookups over the read-only catalog (accounts,
    subsidiary ledgers, branches), returning frozen snapshots.
Architecture position: Kernel > Selectors.

Failure modes:
    - AccountNotFoundError, SubsidiaryLedgerNotFoundError, BranchNotFoundError
      for unknown ids and for ids that belong to another tenant.
"""

from collections.abc import Iterable

from sqlalchemy import select

from ledger_kernel.domain.accounts import (
    AccountInfo,
    BranchInfo,
    SubsidiaryLedgerInfo,
    sort_key_for_code,
)
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    BranchNotFoundError,
    SubsidiaryLedgerNotFoundError,
)
from ledger_kernel.models.account import Account
from ledger_kernel.models.branch import Branch
from ledger_kernel.models.subledger import SubsidiaryLedger
from ledger_kernel.selectors.base import BaseSelector


class CatalogSelector(BaseSelector[Account]):
    """Account, subsidiary ledger and branch lookups for one tenant."""

    def get_account(self, tenant_id: int, account_id: int) -> AccountInfo:
        account = self.session.scalars(
            select(Account).where(
                Account.id == account_id,
                Account.tenant_id == tenant_id,
            )
        ).one_or_none()
        if account is None:
            raise AccountNotFoundError(account_id)
        return AccountInfo.from_model(account)

    def get_accounts(
        self,
        tenant_id: int,
        account_ids: Iterable[int],
    ) -> dict[int, AccountInfo]:
        """
        Load several accounts at once.

        Raises:
            AccountNotFoundError: for the lowest requested id not found.
        """
        wanted = set(account_ids)
        if not wanted:
            return {}
        rows = self.session.scalars(
            select(Account).where(
                Account.id.in_(wanted),
                Account.tenant_id == tenant_id,
            )
        ).all()
        found = {row.id: AccountInfo.from_model(row) for row in rows}
        missing = wanted - found.keys()
        if missing:
            raise AccountNotFoundError(min(missing))
        return found

    def list_accounts(self, tenant_id: int) -> list[AccountInfo]:
        """All accounts of the tenant, ordered by code (numeric-aware)."""
        rows = self.session.scalars(
            select(Account).where(Account.tenant_id == tenant_id)
        ).all()
        accounts = [AccountInfo.from_model(row) for row in rows]
        accounts.sort(key=lambda a: sort_key_for_code(a.code))
        return accounts

    def get_subsidiary_ledger(
        self,
        tenant_id: int,
        subsidiary_ledger_id: int,
    ) -> SubsidiaryLedgerInfo:
        return self.get_subsidiary_ledgers(tenant_id, [subsidiary_ledger_id])[
            subsidiary_ledger_id
        ]

    def get_subsidiary_ledgers(
        self,
        tenant_id: int,
        subsidiary_ledger_ids: Iterable[int],
    ) -> dict[int, SubsidiaryLedgerInfo]:
        wanted = set(subsidiary_ledger_ids)
        if not wanted:
            return {}
        rows = self.session.scalars(
            select(SubsidiaryLedger).where(
                SubsidiaryLedger.id.in_(wanted),
                SubsidiaryLedger.tenant_id == tenant_id,
            )
        ).all()
        found = {row.id: SubsidiaryLedgerInfo.from_model(row) for row in rows}
        missing = wanted - found.keys()
        if missing:
            raise SubsidiaryLedgerNotFoundError(min(missing))
        return found

    def get_branch(self, tenant_id: int, branch_id: int) -> BranchInfo:
        branch = self.session.scalars(
            select(Branch).where(
                Branch.id == branch_id,
                Branch.tenant_id == tenant_id,
            )
        ).one_or_none()
        if branch is None:
            raise BranchNotFoundError(branch_id)
        return BranchInfo.from_model(branch)
