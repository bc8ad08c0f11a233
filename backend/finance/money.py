# finance/money.py
"""
Money parsing.

Amounts arrive as decimal strings ("12.50", "12,50") or numbers and are
stored as integer cents. Rounding is half away from zero everywhere.
Amounts are capped at MAX_AMOUNT_CENTS so ledger sums stay inside a
64-bit integer column.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from finance.exceptions import ValidationError

MONEY_Q = Decimal("0.01")

# 10 billion (currency units)
MAX_AMOUNT_CENTS = 10**12


def _to_decimal(value) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("Invalid amount.")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr() keeps the shortest round-tripping form: 0.1 -> "0.1"
        return Decimal(repr(value))
    if isinstance(value, str):
        text = value.strip()
        if "e" in text.lower():
            raise ValidationError(f"Invalid amount: {value!r}.")
        if text.count(",") == 1 and "." not in text:
            text = text.replace(",", ".")
        try:
            return Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {value!r}.")
    raise ValidationError("Invalid amount.")


def to_cents(value) -> int:
    """
    Convert a decimal amount to integer cents.

    >>> to_cents("20.00")
    2000
    >>> to_cents("0,005")
    1

    Raises:
        ValidationError: if the value is empty, not numeric, NaN, infinite,
            in exponent notation or larger than MAX_AMOUNT_CENTS
    """
    if value is None or value == "":
        raise ValidationError("Amount is required.")
    amount = _to_decimal(value)
    if not amount.is_finite():
        raise ValidationError("Invalid amount.")
    try:
        cents = int(amount.quantize(MONEY_Q, rounding=ROUND_HALF_UP) * 100)
    except InvalidOperation:
        raise ValidationError("Amount is out of range.")
    if abs(cents) > MAX_AMOUNT_CENTS:
        raise ValidationError(f"Amount exceeds the maximum of {from_cents(MAX_AMOUNT_CENTS)}.")
    return cents


def from_cents(cents: int) -> Decimal:
    """2000 -> Decimal("20.00")"""
    return (Decimal(cents) / 100).quantize(MONEY_Q)
