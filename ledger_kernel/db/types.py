"""
Module: ledger_kernel.db.types
Responsibility: Annotated column types and minor-unit money helpers.  Every
    monetary amount in the kernel is an ``int`` count of minor units (cents
    for a two-decimal currency); these helpers are the only sanctioned way to
    convert between that representation and decimal strings.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and reporting.  MUST NOT import from those layers.

Invariants enforced:
    - No floats.  ``float`` and ``bool`` are rejected as amounts.
    - No silent rounding.  A decimal value with more fractional digits than
      the currency allows raises ValueError instead of being rounded.
"""

from decimal import Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import BigInteger

# Monetary amount in minor units
MinorUnits = Annotated[int, BigInteger]

DEFAULT_DECIMAL_PLACES = 2


def is_minor_units(value: object) -> bool:
    """True for a plain int (bool excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def to_minor_units(
    value: Decimal | str | int,
    decimal_places: int = DEFAULT_DECIMAL_PLACES,
) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Example:
        to_minor_units("10.50") -> 1050
        to_minor_units(Decimal("3")) -> 300

    Raises:
        TypeError: for float or bool input.
        ValueError: for unparsable strings or too many fractional digits.
    """
    if isinstance(value, (bool, float)):
        raise TypeError(f"Monetary amounts must not be {type(value).__name__}")
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    scaled = amount.scaleb(decimal_places)
    if scaled != scaled.to_integral_value():
        raise ValueError(
            f"{value!r} has more than {decimal_places} decimal places"
        )
    return int(scaled)


def from_minor_units(value: int, decimal_places: int = DEFAULT_DECIMAL_PLACES) -> Decimal:
    """
    Convert minor units back to a major-unit Decimal.

    Example:
        from_minor_units(1050) -> Decimal("10.50")
    """
    if not is_minor_units(value):
        raise TypeError(f"Minor units must be int, got {type(value).__name__}")
    return Decimal(value).scaleb(-decimal_places)


def format_minor_units(value: int, decimal_places: int = DEFAULT_DECIMAL_PLACES) -> str:
    """Render minor units as a fixed-point string, e.g. -1050 -> '-10.50'."""
    return f"{from_minor_units(value, decimal_places):.{decimal_places}f}"
