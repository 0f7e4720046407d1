"""
positions - Position algebra and multi-hop portfolio valuation.

Build positions in instruments, aggregate them into a portfolio, lower the
portfolio into a symbolic value expression and evaluate it against a price
table in any target asset.

Example:
    >>> from decimal import Decimal
    >>> from positions import Asset, Instrument, Positions, USD
    >>>
    >>> mx, cad = Asset.parse("MX"), Asset.parse("CAD")
    >>> mx_usd = Instrument.spot(mx, USD)
    >>> mx_cad = Instrument.spot(mx, cad)
    >>>
    >>> portfolio = Positions()
    >>> portfolio += mx_usd.position(Decimal("20"), Decimal("50"))
    >>> portfolio += mx_cad.position(Decimal("0.3"), Decimal("10"))
    >>>
    >>> expr = portfolio.as_expr()
    >>> expr.instruments(cad)
    >>> expr.eval(cad, {mx_usd.as_symbol(): Decimal("30"), ...})
"""

from importlib.metadata import version

from positions.asset import BTC, CAD, EUR, USD, USDT, Asset
from positions.errors import (
    DivisionByZero,
    EvalError,
    InvalidAssetCode,
    InvalidPrice,
    InvalidPriceEntry,
    MissingPrice,
    PositionsError,
    UnreachableAsset,
)
from positions.expr import Hop, PriceTable, ValueExpression
from positions.instrument import Instrument, Spot, Symbol
from positions.portfolio import Positions
from positions.position import Position

try:
    __version__ = version("positions")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
    # Assets
    "Asset",
    "USD",
    "EUR",
    "CAD",
    "USDT",
    "BTC",
    # Instruments
    "Instrument",
    "Spot",
    "Symbol",
    # Positions
    "Position",
    "Positions",
    # Valuation
    "ValueExpression",
    "PriceTable",
    "Hop",
    # Errors
    "PositionsError",
    "InvalidAssetCode",
    "InvalidPrice",
    "InvalidPriceEntry",
    "EvalError",
    "MissingPrice",
    "UnreachableAsset",
    "DivisionByZero",
]
