"""
Decimal helpers for monetary and metric values.

Every amount is rounded to the cent half-up before it takes part in
arithmetic and again after each derived sum.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from fleetledger.core.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """
    Convert an incoming number to Decimal without float artifacts.

    Raises:
        ValidationError: If the value is missing, boolean or not numeric
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("a numeric value is required", field=field)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"not a number: {value!r}", field=field) from None
    if not result.is_finite():
        raise ValidationError(f"not a finite number: {value!r}", field=field)
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to the cent, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money(value: Any, field: str = "amount") -> Decimal:
    return round_money(to_decimal(value, field))


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """Sum cent-rounded amounts and round the total."""
    total = ZERO
    for amount in amounts:
        total += round_money(amount)
    return round_money(total)


def require_non_negative(value: Any, field: str) -> Decimal:
    result = to_decimal(value, field)
    if result < 0:
        raise ValidationError(f"must not be negative (got {result})", field=field)
    return result


def format_usd(value: Decimal) -> str:
    return f"${round_money(value):,.2f}"
