"""Position - a signed quantity of one instrument at a weighted-average price."""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from positions.errors import DivisionByZero, InvalidPrice
from positions.instrument import Instrument, Term
from positions.numeric import to_decimal


class Position(BaseModel):
    """
    Signed quantity of an instrument's base asset with its acquisition cost.

    The position keeps the exact quote amount exchanged (``cost``) rather
    than a rounded average price, so merging is plain addition and stays
    associative and commutative. ``price`` is derived on demand as
    ``cost / quantity``.

    Attributes:
        instrument: Instrument held
        quantity: Base units (positive=long, negative=short, zero=flat)
        cost: Quote units exchanged (quantity * price, same sign as quantity)

    Example:
        >>> pos = mx_usd.position(Decimal("20"), Decimal("50"))
        >>> pos.cost
        Decimal('1000')
        >>> (pos + mx_usd.position(Decimal("30"), Decimal("50"))).price
        Decimal('25')
    """

    instrument: Instrument
    quantity: Decimal = Field(..., description="Signed base quantity")
    cost: Decimal = Field(..., description="Signed quote amount exchanged")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def open(cls, instrument: Instrument, price: Any, quantity: Any) -> "Position":
        """
        Open a position of ``quantity`` units at ``price``.

        Raises:
            InvalidPrice: If price is not a positive number
            ValueError: If quantity is not a finite number
        """
        try:
            price = to_decimal(price)
        except ValueError:
            raise InvalidPrice(price) from None
        if price <= 0:
            raise InvalidPrice(price)

        quantity = to_decimal(quantity)
        return cls(instrument=instrument, quantity=quantity, cost=quantity * price)

    @property
    def price(self) -> Decimal:
        """Weighted-average acquisition price (quote per base unit)."""
        if self.quantity == 0:
            raise DivisionByZero(f"Flat position in {self.instrument} has no price")
        return self.cost / self.quantity

    @property
    def side(self) -> Literal["long", "short", "flat"]:
        """Position side based on quantity."""
        if self.quantity > 0:
            return "long"
        elif self.quantity < 0:
            return "short"
        else:
            return "flat"

    @property
    def is_flat(self) -> bool:
        return self.quantity == 0

    def merge(self, other: "Position") -> "Position":
        """
        Combine two positions on the same instrument.

        The result holds ``q1 + q2`` units at the quantity-weighted price
        ``(q1*p1 + q2*p2) / (q1 + q2)``. A flat result is returned as-is;
        callers holding positions drop it.

        Raises:
            ValueError: If the instruments differ
        """
        if other.instrument != self.instrument:
            raise ValueError(f"Cannot merge positions in {self.instrument} and {other.instrument}")
        return Position(
            instrument=self.instrument,
            quantity=self.quantity + other.quantity,
            cost=self.cost + other.cost,
        )

    def __add__(self, other: object) -> "Position":
        if not isinstance(other, Position):
            return NotImplemented
        return self.merge(other)

    def terms(self) -> list[Term]:
        """Value-expression terms contributed by this position."""
        return self.instrument.lower(self.quantity, self.cost)

    def __str__(self) -> str:
        if self.is_flat:
            return f"0 {self.instrument}"
        return f"{self.quantity} {self.instrument} @ {self.price}"

    def __repr__(self) -> str:
        return f"Position({self.instrument!s}, quantity={self.quantity}, cost={self.cost})"
