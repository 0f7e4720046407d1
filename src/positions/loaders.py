"""Portfolio and price table loaders.

Loads YAML documents into engine types.

Portfolio document::

    positions:
      - instrument: MX-USD          # or {kind: spot, base: MX, quote: USD}
        price: "20"
        quantity: "50"

Price table document::

    MX-USD: "30"
    MX-CAD: "0.2"

Numbers may be written as strings or YAML numbers; strings are preferred
since they keep every digit exact.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from positions.errors import InvalidPrice
from positions.expr import PriceTable
from positions.instrument import Instrument, Symbol
from positions.numeric import to_decimal
from positions.portfolio import Positions

logger = structlog.get_logger()


class PositionSpec(BaseModel):
    """One trade in a portfolio document."""

    instrument: Instrument = Field(..., description="Instrument symbol or {kind, ...} mapping")
    price: Decimal = Field(..., gt=0, description="Quote units per base unit")
    quantity: Decimal = Field(..., description="Signed base quantity")

    @field_validator("instrument", mode="before")
    @classmethod
    def parse_instrument(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Instrument.parse(v)
        if isinstance(v, dict):
            return Instrument.from_dict(v)
        return v

    @field_validator("price", "quantity", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal:
        return to_decimal(v)


class PortfolioDocument(BaseModel):
    """Top-level portfolio document."""

    positions: list[PositionSpec] = Field(default_factory=list)

    def to_positions(self) -> Positions:
        portfolio = Positions()
        for spec in self.positions:
            portfolio += spec.instrument.position(spec.price, spec.quantity)
        return portfolio


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML from {path}: {e}")


def load_portfolio(path: Path | str) -> Positions:
    """
    Load a portfolio document and merge its trades in file order.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML or a position entry is invalid
    """
    path = Path(path)
    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Portfolio document {path} must be a mapping with a 'positions' list")

    try:
        document = PortfolioDocument.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid portfolio document {path}: {e}")

    portfolio = document.to_positions()
    logger.info("loaders.portfolio_loaded", path=str(path), trades=len(document.positions), positions=len(portfolio))
    return portfolio


def price_table(prices: Mapping[Any, Any]) -> PriceTable:
    """
    Normalize a mapping into a price table.

    Keys may be symbols in any case or Instrument objects; values any
    finite number.

    Raises:
        InvalidPrice: If a value is not a number
        ValueError: If a key is not a valid instrument symbol
    """
    table: dict[Symbol, Decimal] = {}
    for key, value in prices.items():
        instrument = key if isinstance(key, Instrument) else Instrument.parse(str(key))
        try:
            table[instrument.as_symbol()] = to_decimal(value)
        except ValueError:
            raise InvalidPrice(value) from None
    return table


def load_price_table(path: Path | str) -> PriceTable:
    """
    Load a ``SYMBOL: price`` YAML document.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a mapping of symbols to numbers
    """
    path = Path(path)
    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Price table {path} must be a mapping of SYMBOL: price")

    table = price_table(raw)
    logger.info("loaders.prices_loaded", path=str(path), symbols=len(table))
    return table
