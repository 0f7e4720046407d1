"""Decimal coercion helpers."""

from decimal import Decimal, InvalidOperation
from typing import Any


def to_decimal(value: Any) -> Decimal:
    """
    Convert a user-supplied number to an exact, finite Decimal.

    Floats go through their shortest repr (``0.1 -> Decimal("0.1")``) rather
    than their binary expansion.

    Raises:
        ValueError: If value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a decimal number: {value!r}") from None
    else:
        raise ValueError(f"Expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return result
