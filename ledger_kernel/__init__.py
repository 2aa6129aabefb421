"""
Ledger Kernel

Double-entry voucher ledger with:
- Draft -> Verified -> Approved workflow (or Rejected), serialized per voucher
- Exact integer minor-unit balancing
- Append-only workflow audit trail
- Approved-only aggregation feeding ledger, trial balance and statements
"""

__version__ = "0.1.0"
