"""Fixed-point money helpers.

Amounts live in the domain as integer cents. The store keeps DECIMAL(10,2);
conversions happen only at the repository and HTTP edges.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from ..core.exceptions import ValidationError

Number = Union[int, float, str, Decimal]

_CENT = Decimal("0.01")

# Largest value a DECIMAL(10,2) column holds.
MAX_AMOUNT_CENTS = 99_999_999_99
_MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100


def to_cents(value: Number) -> int:
    """Convert a decimal amount to integer cents (half-up)."""
    try:
        d = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}")
    if not d.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if abs(d) > _MAX_AMOUNT:
        raise ValidationError(f"Amount out of range: {value!r}")
    try:
        return int((d * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}")


def to_cents_or_none(value: Optional[Number]) -> Optional[int]:
    """Lenient parse for optional store columns and form fields."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return to_cents(value)
    except ValidationError:
        return None


def to_decimal(cents: Optional[int]) -> Optional[Decimal]:
    if cents is None:
        return None
    return (Decimal(int(cents)) / 100).quantize(_CENT)


def format_cents(cents: Optional[int]) -> str:
    """Two-place display string, e.g. ``60.00``."""
    return str(to_decimal(cents or 0))


def parse_positive_amount(value: Optional[Number], field_name: str = "Amount") -> int:
    """Parse a user-entered amount that must be finite and greater than zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Invalid {field_name.lower()}")
    cents = to_cents(value)
    if cents <= 0:
        raise ValidationError(f"Invalid {field_name.lower()}")
    return cents
