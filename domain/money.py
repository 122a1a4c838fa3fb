"""
Domain money utilities (pure).

Centralized decimal coercion and rounding helpers. Prices and totals are
always `Decimal`; floats coming from form inputs are converted through `str`
so that 0.1 stays 0.1.

Error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(name: str, value: Any) -> Decimal:
    """
    Coerce a user or wire value into a finite Decimal.

    Accepts Decimal, int, float and numeric strings. Booleans, None and
    non-numeric strings are rejected with a ValidationError keyed by `name`.
    """

    if value is None or isinstance(value, bool):
        raise ValidationError.single(name, "must be a decimal amount")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError.single(name, "must be a decimal amount") from None
    if not result.is_finite():
        raise ValidationError.single(name, "must be a finite amount")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def require_non_negative(name: str, value: Decimal) -> None:
    if value < 0:
        raise ValidationError.single(name, "must not be negative")


def require_price_format(name: str, value: Decimal) -> None:
    """
    Enforces the catalog price invariant.

    Invariants:
    - Prices are non-negative.
    - Prices carry at most two fractional digits.
    """

    require_non_negative(name, value)
    exponent = value.normalize().as_tuple().exponent
    if isinstance(exponent, int) and exponent < -2:
        raise ValidationError.single(name, "must have at most two decimal places")


__all__ = [
    "CENT",
    "ZERO",
    "to_decimal",
    "round_money",
    "require_non_negative",
    "require_price_format",
]
