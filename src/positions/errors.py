"""Exceptions raised by the position algebra and the evaluator.

Hierarchy:
- PositionsError: base for everything raised by this package
  - InvalidAssetCode: malformed asset text
  - InvalidPrice: non-positive price supplied to a position
  - EvalError: evaluation failures
    - MissingPrice: a required instrument has no entry in the price table
    - UnreachableAsset: no conversion chain from a held asset to the target
    - DivisionByZero: zero divisor in a conversion chain
    - InvalidPriceEntry: a price table entry is not a number (also InvalidPrice)
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from positions.asset import Asset
    from positions.instrument import Instrument


class PositionsError(Exception):
    """Base exception for the positions package."""

    pass


class InvalidAssetCode(PositionsError, ValueError):
    """Asset text is not a well-formed code."""

    def __init__(self, text: Any) -> None:
        self.text = text
        super().__init__(f"Invalid asset code: {text!r}")


class InvalidPrice(PositionsError, ValueError):
    """Price must be a positive decimal."""

    def __init__(self, price: Any) -> None:
        self.price = price
        super().__init__(f"Price must be positive, got {price}")


class EvalError(PositionsError):
    """Base exception for expression evaluation failures."""

    pass


class MissingPrice(EvalError):
    """An instrument required for evaluation is absent from the price table."""

    def __init__(self, instrument: Instrument) -> None:
        self.instrument = instrument
        super().__init__(f"Missing price for instrument {instrument.as_symbol()}")


class UnreachableAsset(EvalError):
    """No conversion path exists from a held asset to the target."""

    def __init__(self, asset: Asset, target: Asset) -> None:
        self.asset = asset
        self.target = target
        super().__init__(f"No conversion path from {asset} to {target}")


class DivisionByZero(EvalError, ArithmeticError):
    """Degenerate arithmetic, e.g. a zero price used as a divisor."""

    def __init__(self, message: str, divisor: Decimal = Decimal("0")) -> None:
        self.divisor = divisor
        super().__init__(message)


class InvalidPriceEntry(InvalidPrice, EvalError):
    """A price table entry used by an evaluation is not a finite number."""

    def __init__(self, instrument: Instrument, price: Any) -> None:
        self.instrument = instrument
        self.price = price
        PositionsError.__init__(self, f"Invalid price for instrument {instrument.as_symbol()}: {price!r}")
