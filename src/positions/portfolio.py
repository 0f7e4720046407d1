"""Positions - an aggregated, mergeable collection of positions.

One position per instrument. Positions are merged with ``+=``:

- same instrument: quantities add, prices combine by quantity-weighted
  average; a position merged down to zero is removed
- new instrument: the position is stored as-is
- another portfolio: the rule above applied across the union of instruments

The container is single-owner and not thread-safe; share it across threads
only behind a lock, or snapshot it with ``as_expr()`` first.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Iterator

import structlog

from positions.asset import Asset
from positions.instrument import Cash, Instrument
from positions.position import Position

if TYPE_CHECKING:
    from positions.expr import ValueExpression

logger = structlog.get_logger()


class Positions:
    """
    Portfolio of positions keyed by instrument.

    Iteration order is the order instruments were first added, which is also
    the construction order of expressions built from the portfolio.

    Example:
        >>> portfolio = Positions()
        >>> portfolio += mx_usd.position(Decimal("20"), Decimal("50"))
        >>> portfolio += usd_mx.position(Decimal("0.06"), Decimal("6"))
        >>> expr = portfolio.as_expr()
    """

    def __init__(self, positions: Iterable[Position] = ()) -> None:
        self._positions: dict[Instrument, Position] = {}
        for position in positions:
            self.add(position)

    def add(self, position: Position) -> None:
        """Merge a single position into the portfolio."""
        instrument = position.instrument
        existing = self._positions.get(instrument)
        merged = position if existing is None else existing.merge(position)

        if merged.is_flat:
            if existing is not None:
                del self._positions[instrument]
                logger.debug("positions.closed", instrument=str(instrument))
            return

        self._positions[instrument] = merged
        if existing is not None:
            logger.debug(
                "positions.merged",
                instrument=str(instrument),
                quantity=str(merged.quantity),
                price=str(merged.price),
            )

    def extend(self, other: Positions | Iterable[Position]) -> None:
        """Merge every position of ``other`` into the portfolio."""
        # Snapshot first so ``p.extend(p)`` doubles rather than loops
        for position in list(other):
            self.add(position)

    def __iadd__(self, other: object) -> Positions:
        if isinstance(other, Position):
            self.add(other)
        elif isinstance(other, Positions):
            self.extend(other)
        else:
            return NotImplemented
        return self

    def __add__(self, other: object) -> Positions:
        if not isinstance(other, (Position, Positions)):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def copy(self) -> Positions:
        result = Positions()
        result._positions = dict(self._positions)
        return result

    def get(self, instrument: Instrument) -> Position | None:
        """Get the position held in ``instrument``, if any."""
        return self._positions.get(instrument)

    def instruments(self) -> list[Instrument]:
        """Instruments held, in insertion order."""
        return list(self._positions)

    def holdings(self) -> dict[Asset, Decimal]:
        """
        Contents of the portfolio: units held per asset, ignoring what was paid.

        A spot position holds its quantity of the base asset. Positions in
        reciprocal instruments are not netted, so the MX/USD/CAD book holds
        60 MX and 6 USD. Assets summing to zero are omitted.
        """
        return _sum_legs(
            leg for position in self._positions.values() for leg in position.instrument.contents(position.quantity)
        )

    def balances(self) -> dict[Asset, Decimal]:
        """
        Net signed balance per asset implied by the trades.

        Long spot positions add base units and remove the quote units paid;
        shorts do the opposite. Assets netting to zero are omitted.
        """
        return _sum_legs(
            leg
            for position in self._positions.values()
            for leg in position.instrument.legs(position.quantity, position.cost)
        )

    def as_expr(self) -> ValueExpression:
        """Lower the portfolio into a symbolic value expression."""
        from positions.expr import ValueExpression

        return ValueExpression.from_positions(self._positions.values())

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions.values())

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, instrument: object) -> bool:
        return instrument in self._positions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Positions):
            return NotImplemented
        return self._positions == other._positions

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if not self._positions:
            return "Positions(empty)"
        return "\n".join(str(position) for position in self._positions.values())

    def __repr__(self) -> str:
        return f"Positions({list(self._positions.values())!r})"


def _sum_legs(legs: Iterable[Cash]) -> dict[Asset, Decimal]:
    totals: dict[Asset, Decimal] = defaultdict(Decimal)
    for leg in legs:
        totals[leg.asset] += leg.amount
    return {asset: amount for asset, amount in totals.items() if amount != 0}
