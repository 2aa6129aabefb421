"""
Voucher line validation -- pure checks run before any write.

Order of checks (first failure wins):

1. at least one line                      -> EmptyVoucherError
2. every amount is a non-negative int,
   and no line is both debit and credit   -> InvalidLineAmountError
3. sum(debit) == sum(credit), exactly     -> UnbalancedVoucherError
4. subsidiary ledger rules per line       -> MissingSubsidiaryLedgerError,
                                             SubsidiaryTypeMismatchError,
                                             SubsidiaryControlAccountMismatchError

Steps 1-3 need only the input.  Step 4 needs catalog snapshots, which the
workflow service loads (raising NotFoundError for unknown ids) before
calling validate_subsidiary_requirements().  Line indexes in errors are
1-based to match line_no.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ledger_kernel.db.types import is_minor_units
from ledger_kernel.domain.accounts import AccountInfo, SubsidiaryLedgerInfo
from ledger_kernel.domain.dtos import VoucherLineInput
from ledger_kernel.exceptions import (
    EmptyVoucherError,
    InvalidLineAmountError,
    MissingSubsidiaryLedgerError,
    SubsidiaryControlAccountMismatchError,
    SubsidiaryTypeMismatchError,
    UnbalancedVoucherError,
)


def validate_line_amounts(lines: Sequence[VoucherLineInput]) -> None:
    for index, line in enumerate(lines, start=1):
        for field_name in ("debit", "credit"):
            value = getattr(line, field_name)
            if not is_minor_units(value):
                raise InvalidLineAmountError(
                    index, field_name, value, "amount must be integer minor units"
                )
            if value < 0:
                raise InvalidLineAmountError(
                    index, field_name, value, "amount cannot be negative"
                )
        if line.debit and line.credit:
            raise InvalidLineAmountError(
                index,
                "debit/credit",
                (line.debit, line.credit),
                "a line is either a debit or a credit",
            )


def validate_balance(
    lines: Sequence[VoucherLineInput],
    voucher_id: int | None = None,
) -> int:
    """Return the balanced total, or raise UnbalancedVoucherError."""
    debits = sum(line.debit for line in lines)
    credits = sum(line.credit for line in lines)
    if debits != credits:
        raise UnbalancedVoucherError(debits, credits, voucher_id)
    return debits


def validate_voucher_lines(
    lines: Sequence[VoucherLineInput],
    voucher_id: int | None = None,
) -> int:
    """Structural checks 1-3.  Returns the voucher total in minor units."""
    if not lines:
        raise EmptyVoucherError(voucher_id)
    validate_line_amounts(lines)
    return validate_balance(lines, voucher_id)


def validate_subsidiary_requirements(
    lines: Sequence[VoucherLineInput],
    accounts: Mapping[int, AccountInfo],
    ledgers: Mapping[int, SubsidiaryLedgerInfo],
) -> None:
    """
    Check each line's subsidiary ledger against its account.

    ``accounts`` must hold every line's account and ``ledgers`` every
    referenced subsidiary ledger.
    """
    for index, line in enumerate(lines, start=1):
        account = accounts[line.account_id]
        required_type = account.required_subsidiary_type_id

        if line.subsidiary_ledger_id is None:
            if required_type is not None:
                raise MissingSubsidiaryLedgerError(index, account.id, required_type)
            continue

        ledger = ledgers[line.subsidiary_ledger_id]
        if ledger.control_account_id != account.id:
            raise SubsidiaryControlAccountMismatchError(
                index, ledger.id, ledger.control_account_id, account.id
            )
        if required_type is not None and ledger.subsidiary_type_id != required_type:
            raise SubsidiaryTypeMismatchError(
                index, ledger.id, required_type, ledger.subsidiary_type_id
            )
