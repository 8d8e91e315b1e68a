"""
Till Money Primitive — Decimal Amounts
=========================================
All monetary values are Decimal and keep full precision through
every pricing step. Rounding to cents happens only when an amount is
shown to a person (quantize_money / format_money).

RULES:
- No floats in state; floats are converted through str()
- bool is not a number here
- NaN and infinity are rejected
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.commands.errors import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """Convert user input to Decimal or raise ValidationError."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number.")

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(
                f"{field_name} must be a number, got {value!r}."
            ) from None

    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite.")
    return result


def to_non_negative(value, field_name: str = "amount") -> Decimal:
    result = to_decimal(value, field_name)
    if result < ZERO:
        raise ValidationError(f"{field_name} must be >= 0, got {result}.")
    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round to two places for display. Never feed the result back."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    return f"${quantize_money(amount)}"
