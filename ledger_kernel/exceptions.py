"""
Typed exception hierarchy for the ledger kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerKernelError:

    LedgerKernelError (base)
    |
    +-- ValidationError
    |   +-- EmptyVoucherError
    |   +-- UnbalancedVoucherError
    |   +-- InvalidLineAmountError
    |   +-- MissingSubsidiaryLedgerError
    |   +-- SubsidiaryTypeMismatchError
    |   +-- SubsidiaryControlAccountMismatchError
    |   +-- MissingCommentError
    |   +-- InvalidDateRangeError
    |   +-- AccountHierarchyError
    |
    +-- InvalidStateError
    |
    +-- NotFoundError
    |   +-- VoucherNotFoundError
    |   +-- AccountNotFoundError
    |   +-- BranchNotFoundError
    |   +-- SubsidiaryLedgerNotFoundError
    |
    +-- StoreError
    |
    +-- VoucherSequenceExhaustedError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                              | When Raised
--------------|-----------------------------------|-------------------------------------
Validation    | EMPTY_VOUCHER                     | Voucher has no detail lines
              | UNBALANCED_VOUCHER                | Sum(debit) != Sum(credit)
              | INVALID_LINE_AMOUNT               | Negative, non-integer, or two-sided
              | MISSING_SUBSIDIARY_LEDGER         | Account requires a subsidiary ledger
              | SUBSIDIARY_TYPE_MISMATCH          | Ledger type != account's required type
              | SUBSIDIARY_CONTROL_ACCOUNT_MISMATCH | Ledger linked to another account
              | MISSING_COMMENT                   | Rejection without a reason
              | INVALID_DATE_RANGE                | Report from_date > to_date
              | ACCOUNT_HIERARCHY_INVALID         | Missing parent or parent cycle
--------------|-----------------------------------|-------------------------------------
State         | INVALID_STATE                     | Transition from a disallowed status
--------------|-----------------------------------|-------------------------------------
Not found     | VOUCHER_NOT_FOUND                 | Unknown voucher (or other tenant)
              | ACCOUNT_NOT_FOUND                 | Unknown account (or other tenant)
              | BRANCH_NOT_FOUND                  | Unknown branch (or other tenant)
              | SUBSIDIARY_LEDGER_NOT_FOUND       | Unknown subsidiary ledger
--------------|-----------------------------------|-------------------------------------
Store         | STORE_ERROR                       | Persistence failure / query timeout
--------------|-----------------------------------|-------------------------------------
Numbering     | VOUCHER_SEQUENCE_EXHAUSTED        | Counter outgrew the sequence width
--------------|-----------------------------------|-------------------------------------
Immutability  | IMMUTABILITY_VIOLATION            | Modifying an append-only/terminal row

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        kernel.approve_voucher(voucher_id, actor="alice", tenant_id=7)
    except InvalidStateError as e:
        # Re-fetch and show the current status; safe to retry by hand.
        return {"error": e.code, "status": e.current_status}
    except StoreError:
        # The only category a caller may retry automatically (with backoff).
        raise

ValidationError and NotFoundError are never retried.  The kernel itself
performs no implicit retries: retrying a write whose outcome is unknown
risks duplicate postings.
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    identification and expose their context as attributes.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Validation exceptions


class ValidationError(LedgerKernelError):
    """A voucher or report request fails a precondition."""

    code: str = "VALIDATION_ERROR"


class EmptyVoucherError(ValidationError):
    """Voucher has no detail lines."""

    code: str = "EMPTY_VOUCHER"

    def __init__(self, voucher_id: int | None = None):
        self.voucher_id = voucher_id
        super().__init__("Voucher must have at least one detail line")


class UnbalancedVoucherError(ValidationError):
    """Voucher debits do not equal credits."""

    code: str = "UNBALANCED_VOUCHER"

    def __init__(self, debits: int, credits: int, voucher_id: int | None = None):
        self.debits = debits
        self.credits = credits
        self.voucher_id = voucher_id
        super().__init__(
            f"Unbalanced voucher: debits={debits}, credits={credits}"
        )


class InvalidLineAmountError(ValidationError):
    """A detail line carries an amount the ledger cannot accept."""

    code: str = "INVALID_LINE_AMOUNT"

    def __init__(self, line_index: int, field: str, value: object, reason: str):
        self.line_index = line_index
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Line {line_index}: invalid {field} {value!r} ({reason})"
        )


class MissingSubsidiaryLedgerError(ValidationError):
    """Account requires a subsidiary ledger on every posting."""

    code: str = "MISSING_SUBSIDIARY_LEDGER"

    def __init__(self, line_index: int, account_id: int, required_type_id: int):
        self.line_index = line_index
        self.account_id = account_id
        self.required_type_id = required_type_id
        super().__init__(
            f"Line {line_index}: account {account_id} requires a subsidiary "
            f"ledger of type {required_type_id}"
        )


class SubsidiaryTypeMismatchError(ValidationError):
    """Subsidiary ledger type differs from the account's required type."""

    code: str = "SUBSIDIARY_TYPE_MISMATCH"

    def __init__(
        self,
        line_index: int,
        subsidiary_ledger_id: int,
        expected_type_id: int,
        actual_type_id: int,
    ):
        self.line_index = line_index
        self.subsidiary_ledger_id = subsidiary_ledger_id
        self.expected_type_id = expected_type_id
        self.actual_type_id = actual_type_id
        super().__init__(
            f"Line {line_index}: subsidiary ledger {subsidiary_ledger_id} has "
            f"type {actual_type_id}, expected {expected_type_id}"
        )


class SubsidiaryControlAccountMismatchError(ValidationError):
    """Subsidiary ledger is linked under a different control account."""

    code: str = "SUBSIDIARY_CONTROL_ACCOUNT_MISMATCH"

    def __init__(
        self,
        line_index: int,
        subsidiary_ledger_id: int,
        expected_account_id: int,
        actual_account_id: int,
    ):
        self.line_index = line_index
        self.subsidiary_ledger_id = subsidiary_ledger_id
        self.expected_account_id = expected_account_id
        self.actual_account_id = actual_account_id
        super().__init__(
            f"Line {line_index}: subsidiary ledger {subsidiary_ledger_id} is "
            f"linked to account {expected_account_id}, not {actual_account_id}"
        )


class MissingCommentError(ValidationError):
    """A transition that requires a comment was attempted without one."""

    code: str = "MISSING_COMMENT"

    def __init__(self, voucher_id: int, action: str):
        self.voucher_id = voucher_id
        self.action = action
        super().__init__(f"Voucher {voucher_id}: {action} requires a comment")


class InvalidDateRangeError(ValidationError):
    """Report range has from_date after to_date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, from_date: str, to_date: str):
        self.from_date = from_date
        self.to_date = to_date
        super().__init__(f"Invalid date range: {from_date} is after {to_date}")


class AccountHierarchyError(ValidationError):
    """
    The chart of accounts violates its tree invariant.

    Raised when a non-root account references a parent that does not
    exist in the tenant's catalog, or when the parent chain loops.
    """

    code: str = "ACCOUNT_HIERARCHY_INVALID"

    def __init__(self, account_id: int, reason: str):
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Account {account_id}: {reason}")


# State exceptions


class InvalidStateError(LedgerKernelError):
    """
    Transition attempted from a status that does not allow it.

    Also raised to the loser of a concurrent transition race; in that case
    current_status is the status written by the winner.
    """

    code: str = "INVALID_STATE"

    def __init__(self, voucher_id: int, current_status: str, action: str):
        self.voucher_id = voucher_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Voucher {voucher_id}: cannot {action} from status '{current_status}'"
        )


# Not-found exceptions


class NotFoundError(LedgerKernelError):
    """Base exception for unknown entity ids."""

    code: str = "NOT_FOUND"


class VoucherNotFoundError(NotFoundError):
    """Voucher with given id does not exist for the tenant."""

    code: str = "VOUCHER_NOT_FOUND"

    def __init__(self, voucher_id: int):
        self.voucher_id = voucher_id
        super().__init__(f"Voucher not found: {voucher_id}")


class AccountNotFoundError(NotFoundError):
    """Account with given id does not exist for the tenant."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class BranchNotFoundError(NotFoundError):
    """Branch with given id does not exist for the tenant."""

    code: str = "BRANCH_NOT_FOUND"

    def __init__(self, branch_id: int):
        self.branch_id = branch_id
        super().__init__(f"Branch not found: {branch_id}")


class SubsidiaryLedgerNotFoundError(NotFoundError):
    """Subsidiary ledger with given id does not exist for the tenant."""

    code: str = "SUBSIDIARY_LEDGER_NOT_FOUND"

    def __init__(self, subsidiary_ledger_id: int):
        self.subsidiary_ledger_id = subsidiary_ledger_id
        super().__init__(f"Subsidiary ledger not found: {subsidiary_ledger_id}")


# Store exceptions


class StoreError(LedgerKernelError):
    """
    Underlying persistence failure (connection loss, timeout, constraint).

    The only category eligible for caller-level retry with backoff.
    """

    code: str = "STORE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Store failure during {operation}: {detail}")


# Numbering exceptions


class VoucherSequenceExhaustedError(LedgerKernelError):
    """
    The counter for a (branch, voucher type) scope has run past the
    configured sequence width.

    Numbers are never widened: a wider sequence would sort before the
    narrower ones as a string and break ledger ordering.
    """

    code: str = "VOUCHER_SEQUENCE_EXHAUSTED"

    def __init__(self, branch_code: str, voucher_type: str, value: int, width: int):
        self.branch_code = branch_code
        self.voucher_type = voucher_type
        self.value = value
        self.width = width
        super().__init__(
            f"Voucher sequence {voucher_type}-{branch_code} reached {value}, "
            f"which does not fit in {width} digits"
        )


# Immutability exceptions


class ImmutabilityViolationError(LedgerKernelError):
    """Attempted to modify or delete an append-only or terminal record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
