"""ValueExpression - symbolic portfolio value as a function of instrument prices.

A portfolio lowers into terms grouped by the asset they are denominated in:

- marks: ``quantity x price_of(instrument)`` (a position's base leg valued
  through its own instrument, denominated in the quote asset)
- cash: fixed amounts (the quote paid or received)

Instruments double as directed edges of a conversion graph
(``base -> quote``: one base unit is worth ``price`` quote units). To value
the expression in a target asset, each denomination's local value is walked
along the shortest path of edges to the target, multiplying by each edge's
price.

A held edge may be walked against its direction too. By default that hop is
priced through the reciprocal instrument (``USD-MX`` for a held ``MX-USD``)
under its own symbol; a price is never inverted automatically. With
``allow_inverse=True`` the hop divides by the held instrument's price
instead.

Expressions are immutable snapshots. ``eval`` recomputes from scratch on
every call, so one expression can be evaluated under many price scenarios.
"""

from collections import deque
from decimal import Decimal
from typing import Iterable, Mapping, NamedTuple

import structlog

from positions.asset import Asset
from positions.errors import DivisionByZero, InvalidPriceEntry, MissingPrice, UnreachableAsset
from positions.instrument import Cash, Edge, Instrument, Mark, Symbol, Term
from positions.numeric import to_decimal
from positions.position import Position

logger = structlog.get_logger()

PriceTable = Mapping[Symbol, Decimal]


class Hop(NamedTuple):
    """
    One step of a conversion path.

    The value is multiplied by the price of ``instrument``, or divided by it
    when ``inverse`` is set.
    """

    instrument: Instrument
    inverse: bool  # divide by the price of a held edge walked quote -> base


class _ConversionGraph:
    """
    Instrument graph over interned asset indices.

    Assets are interned to integers in first-seen order and adjacency lists
    hold edge indices, so reciprocal instruments (MX-USD next to USD-MX)
    are just two entries in flat lists.
    """

    def __init__(self, instruments: Iterable[Instrument]) -> None:
        self._assets: list[Asset] = []
        self._index: dict[Asset, int] = {}
        self._edges: list[Edge] = []
        # Per asset index: (edge index, neighbour index)
        self._outgoing: list[list[tuple[int, int]]] = []
        self._incoming: list[list[tuple[int, int]]] = []

        for instrument in instruments:
            for edge in instrument.edges():
                source = self._intern(edge.source)
                target = self._intern(edge.target)
                edge_index = len(self._edges)
                self._edges.append(edge)
                self._outgoing[source].append((edge_index, target))
                self._incoming[target].append((edge_index, source))

    def _intern(self, asset: Asset) -> int:
        index = self._index.get(asset)
        if index is None:
            index = len(self._assets)
            self._index[asset] = index
            self._assets.append(asset)
            self._outgoing.append([])
            self._incoming.append([])
        return index

    def path(self, source: Asset, target: Asset, allow_inverse: bool = False) -> list[Hop] | None:
        """
        Shortest conversion path from ``source`` to ``target``.

        Breadth-first in construction order, so the result is deterministic.
        At each asset, edges along their direction are tried before edges
        walked backwards. A backward hop is priced through the reciprocal
        instrument, or by dividing by the edge's own price when
        ``allow_inverse`` is set.

        Returns:
            Hops to walk (empty when source is target), or None if unreachable
        """
        if source == target:
            return []
        start = self._index.get(source)
        goal = self._index.get(target)
        if start is None or goal is None:
            return None

        # visited[node] = (previous node, hop) on the BFS tree
        visited: dict[int, tuple[int, Hop] | None] = {start: None}
        queue: deque[int] = deque([start])
        while queue:
            node = queue.popleft()
            if node == goal:
                break
            for edge, nxt in self._outgoing[node]:
                if nxt not in visited:
                    visited[nxt] = (node, Hop(self._edges[edge].instrument, False))
                    queue.append(nxt)
            for edge, nxt in self._incoming[node]:
                if nxt not in visited:
                    visited[nxt] = (node, self._backward_hop(edge, allow_inverse))
                    queue.append(nxt)

        if goal not in visited:
            return None

        hops: list[Hop] = []
        node = goal
        while (step := visited[node]) is not None:
            node, hop = step
            hops.append(hop)
        hops.reverse()
        return hops

    def _backward_hop(self, edge: int, allow_inverse: bool) -> Hop:
        instrument = self._edges[edge].instrument
        if allow_inverse:
            return Hop(instrument, True)
        return Hop(instrument.reciprocal(), False)


class ValueExpression:
    """
    Immutable symbolic value of a set of positions.

    Build with ``Positions.as_expr()`` (or ``ValueExpression.from_positions``),
    then ask which prices a valuation needs with ``instruments(target)`` and
    evaluate with ``eval(target, prices)``.

    Example:
        >>> expr = portfolio.as_expr()
        >>> [str(i) for i in expr.instruments(cad)]
        ['MX-USD', 'USD-MX', 'MX-CAD']
        >>> expr.eval(cad, prices).quantize(Decimal("0.000001"))
        Decimal('2.301333')
    """

    def __init__(self, terms: Iterable[Term]) -> None:
        self._cash: dict[Asset, Decimal] = {}
        self._marks: dict[Asset, dict[Instrument, Decimal]] = {}

        for term in terms:
            if isinstance(term, Mark):
                marks = self._marks.setdefault(term.asset, {})
                marks[term.instrument] = marks.get(term.instrument, Decimal("0")) + term.quantity
                self._cash.setdefault(term.asset, Decimal("0"))
            elif isinstance(term, Cash):
                self._cash[term.asset] = self._cash.get(term.asset, Decimal("0")) + term.amount
            else:
                raise TypeError(f"Unknown expression term: {term!r}")

        instruments = [instrument for marks in self._marks.values() for instrument in marks]
        self._graph = _ConversionGraph(instruments)

    @classmethod
    def from_positions(cls, positions: Iterable[Position]) -> "ValueExpression":
        """Lower positions into an expression, in iteration order."""
        terms: list[Term] = []
        for position in positions:
            terms.extend(position.terms())
        expr = cls(terms)
        logger.debug("expr.built", terms=len(terms), denominations=len(expr._cash))
        return expr

    def assets(self) -> list[Asset]:
        """Denomination assets with a nonzero contribution, in construction order."""
        return [asset for asset in self._cash if self._is_held(asset)]

    def marks(self, asset: Asset) -> dict[Instrument, Decimal]:
        """Instrument quantities marked in ``asset``."""
        return dict(self._marks.get(asset, {}))

    def cash(self, asset: Asset) -> Decimal:
        """Fixed amount denominated in ``asset``."""
        return self._cash.get(asset, Decimal("0"))

    def _is_held(self, asset: Asset) -> bool:
        if self._cash.get(asset, Decimal("0")) != 0:
            return True
        return any(quantity != 0 for quantity in self._marks.get(asset, {}).values())

    def path(self, source: Asset, target: Asset, allow_inverse: bool = False) -> list[Hop] | None:
        """Conversion path used to carry ``source`` value into ``target``."""
        return self._graph.path(source, target, allow_inverse)

    def instruments(self, target: Asset, allow_inverse: bool = False) -> list[Instrument]:
        """
        Instruments whose prices are needed to value the expression in ``target``.

        For every held denomination asset: its marked instruments, then the
        instruments priced along its conversion path to ``target`` (the
        reciprocal of a held edge walked backwards, unless ``allow_inverse``).
        Ordered by construction, without duplicates. Assets with no path contribute only their marks;
        ``eval`` reports them as unreachable.
        """
        required: dict[Instrument, None] = {}
        for asset in self.assets():
            for instrument, quantity in self._marks.get(asset, {}).items():
                if quantity != 0:
                    required[instrument] = None
            hops = self._graph.path(asset, target, allow_inverse)
            if hops is None:
                logger.debug("expr.unreachable_asset", asset=str(asset), target=str(target))
                continue
            for hop in hops:
                required[hop.instrument] = None
        return list(required)

    def eval(self, target: Asset, prices: PriceTable, allow_inverse: bool = False) -> Decimal:
        """
        Value the expression in ``target``.

        Args:
            target: Asset to express the total in
            prices: Price per instrument symbol
            allow_inverse: Walk held edges backwards by dividing by their price
                instead of looking up the reciprocal instrument

        Returns:
            Total value in target units

        Raises:
            UnreachableAsset: A held asset has no conversion path to target
            MissingPrice: A required instrument has no entry in prices
            InvalidPriceEntry: A required entry is not a finite number
            DivisionByZero: An inverse hop has a zero price
        """
        total = Decimal("0")
        for asset in self.assets():
            hops = self._graph.path(asset, target, allow_inverse)
            if hops is None:
                logger.warning("expr.unreachable_asset", asset=str(asset), target=str(target))
                raise UnreachableAsset(asset, target)

            value = self._cash.get(asset, Decimal("0"))
            for instrument, quantity in self._marks.get(asset, {}).items():
                if quantity != 0:
                    value += quantity * _lookup(prices, instrument)

            for hop in hops:
                price = _lookup(prices, hop.instrument)
                if not hop.inverse:
                    value *= price
                elif price == 0:
                    raise DivisionByZero(f"Zero price for {hop.instrument} on inverse conversion")
                else:
                    value /= price
            total += value

        logger.debug("expr.evaluated", target=str(target), value=str(total))
        return total

    def render(self, asset: Asset) -> str:
        """Human-readable value denominated in ``asset``, e.g. ``50 * [MX-USD] - 1000``."""
        parts = [f"{quantity} * [{instrument}]" for instrument, quantity in self._marks.get(asset, {}).items()]
        cash = self._cash.get(asset, Decimal("0"))
        if cash != 0 or not parts:
            parts.append(str(cash))
        return " + ".join(parts).replace("+ -", "- ")

    def __str__(self) -> str:
        lines = [f"{asset}: {self.render(asset)}" for asset in self.assets()]
        return "\n".join(lines) if lines else "0"

    def __repr__(self) -> str:
        return f"ValueExpression({', '.join(str(asset) for asset in self.assets())})"


def _lookup(prices: PriceTable, instrument: Instrument) -> Decimal:
    price = prices.get(instrument.as_symbol())
    if price is None:
        logger.warning("expr.missing_price", instrument=str(instrument))
        raise MissingPrice(instrument)
    try:
        return to_decimal(price)
    except ValueError:
        raise InvalidPriceEntry(instrument, price) from None
