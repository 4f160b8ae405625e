from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

BRAZILIAN_STATES = frozenset({
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO",
    "MA", "MT", "MS", "MG", "PA", "PB", "PR", "PE", "PI",
    "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
})


def is_valid_state(value: str) -> bool:
    """Return True if *value* is one of the 27 UF codes."""
    return value in BRAZILIAN_STATES


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a number or numeric string to Decimal.

    Returns None for None, empty strings, booleans, non-numeric and
    non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    return d


def parse_amount(text: str | None) -> Decimal:
    """Parse a monetary XML text node, falling back to zero."""
    d = to_decimal(text)
    return d if d is not None else Decimal("0")
