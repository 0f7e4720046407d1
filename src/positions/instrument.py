"""Instruments - tradeable relationships between two assets.

Instruments form a closed set of kinds, registered by their ``kind`` tag.
Today the only kind is ``spot``: a directed exchange pair base/quote.

Every kind answers two questions for the valuation engine:
- ``lower(quantity, cost)``: which terms a position in it contributes to a
  value expression
- ``edges()``: which directed conversions it adds to the instrument graph

New kinds (forwards, swaps) plug in by implementing both, without changes to
the evaluator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Literal, NamedTuple, NewType, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from positions.asset import Asset

if TYPE_CHECKING:
    from positions.position import Position

Symbol = NewType("Symbol", str)

# Separator between base and quote; never valid inside an asset code
SYMBOL_SEPARATOR = "-"


class Mark(NamedTuple):
    """``quantity x price_of(instrument)``, denominated in ``asset``."""

    asset: Asset
    instrument: "Instrument"
    quantity: Decimal


class Cash(NamedTuple):
    """A fixed ``amount`` of ``asset``."""

    asset: Asset
    amount: Decimal


Term = Union[Mark, Cash]


class Edge(NamedTuple):
    """One unit of ``source`` is worth ``price_of(instrument)`` units of ``target``."""

    source: Asset
    target: Asset
    instrument: "Instrument"


class Instrument(BaseModel, ABC):
    """
    Base class for all instrument kinds.

    Instruments are immutable and hashable; two instruments are equal iff
    they are the same kind over the same assets.
    """

    kind: str

    model_config = ConfigDict(frozen=True)

    @staticmethod
    def spot(base: Asset, quote: Asset) -> "Spot":
        """Construct the spot pair base/quote."""
        return Spot(base=base, quote=quote)

    @classmethod
    def parse(cls, text: str) -> "Instrument":
        """
        Parse an instrument from its symbol (e.g. ``"MX-USD"``).

        Raises:
            ValueError: If the text has no base/quote separator
            InvalidAssetCode: If either side is not a valid asset code
        """
        base, sep, quote = text.strip().partition(SYMBOL_SEPARATOR)
        if not sep:
            raise ValueError(f"Invalid instrument symbol: {text!r} (expected BASE-QUOTE)")
        return Spot(base=Asset.parse(base), quote=Asset.parse(quote))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Instrument":
        """Build an instrument from a ``{kind: ..., ...}`` mapping."""
        kind = data.get("kind", "spot")
        try:
            model = INSTRUMENT_KINDS[kind]
        except KeyError:
            raise ValueError(f"Unknown instrument kind: {kind!r}. Known: {sorted(INSTRUMENT_KINDS)}") from None
        return model.model_validate(data)

    @abstractmethod
    def as_symbol(self) -> Symbol:
        """Canonical, injective symbol; the price table key for this instrument."""
        raise NotImplementedError

    @abstractmethod
    def assets(self) -> tuple[Asset, ...]:
        """Assets this instrument relates."""
        raise NotImplementedError

    @abstractmethod
    def lower(self, quantity: Decimal, cost: Decimal) -> list[Term]:
        """Terms contributed by ``quantity`` units bought for ``cost``."""
        raise NotImplementedError

    @abstractmethod
    def contents(self, quantity: Decimal) -> list[Cash]:
        """Assets a position of ``quantity`` units holds, regardless of what was paid."""
        raise NotImplementedError

    @abstractmethod
    def legs(self, quantity: Decimal, cost: Decimal) -> list[Cash]:
        """Net asset balances produced by the trade."""
        raise NotImplementedError

    @abstractmethod
    def edges(self) -> list[Edge]:
        """Directed conversions contributed to the instrument graph."""
        raise NotImplementedError

    @abstractmethod
    def reciprocal(self) -> Instrument:
        """The instrument quoting this one's conversion in the opposite direction."""
        raise NotImplementedError

    @property
    def symbol(self) -> Symbol:
        return self.as_symbol()

    def position(self, price: Decimal | int | str, quantity: Decimal | int | str) -> Position:
        """
        Bind this instrument to a signed quantity acquired at ``price``.

        Args:
            price: Quote units paid per base unit (must be positive)
            quantity: Base units (positive=long, negative=short)

        Raises:
            InvalidPrice: If price is zero or negative
        """
        from positions.position import Position

        return Position.open(self, price=price, quantity=quantity)

    def __str__(self) -> str:
        return self.as_symbol()


class Spot(Instrument):
    """
    Spot exchange pair: one unit of ``base`` quoted in ``quote``.

    ``Spot(MX, USD)`` and ``Spot(USD, MX)`` are distinct instruments
    representing reciprocal quotations; neither is derived from the other.

    Example:
        >>> mx_usd = Instrument.spot(Asset.parse("MX"), Asset.parse("USD"))
        >>> mx_usd.as_symbol()
        'MX-USD'
    """

    kind: Literal["spot"] = "spot"
    base: Asset = Field(..., description="Asset bought or sold")
    quote: Asset = Field(..., description="Asset the price is expressed in")

    @field_validator("base", "quote", mode="before")
    @classmethod
    def parse_asset(cls, v: Any) -> Any:
        """Accept asset codes as plain strings."""
        if isinstance(v, str):
            return Asset.parse(v)
        return v

    @model_validator(mode="after")
    def validate_distinct(self) -> "Spot":
        if self.base == self.quote:
            raise ValueError(f"Spot base and quote must differ, got {self.base}/{self.quote}")
        return self

    def as_symbol(self) -> Symbol:
        return Symbol(f"{self.base}{SYMBOL_SEPARATOR}{self.quote}")

    def assets(self) -> tuple[Asset, ...]:
        return (self.base, self.quote)

    def lower(self, quantity: Decimal, cost: Decimal) -> list[Term]:
        # Base leg marked through this instrument; quote leg is the cash paid
        return [Mark(self.quote, self, quantity), Cash(self.quote, -cost)]

    def contents(self, quantity: Decimal) -> list[Cash]:
        return [Cash(self.base, quantity)]

    def legs(self, quantity: Decimal, cost: Decimal) -> list[Cash]:
        return [Cash(self.base, quantity), Cash(self.quote, -cost)]

    def edges(self) -> list[Edge]:
        return [Edge(self.base, self.quote, self)]

    def reciprocal(self) -> Spot:
        return Spot(base=self.quote, quote=self.base)

    def __repr__(self) -> str:
        return f"Spot({self.base}/{self.quote})"


INSTRUMENT_KINDS: dict[str, type[Instrument]] = {
    "spot": Spot,
}
