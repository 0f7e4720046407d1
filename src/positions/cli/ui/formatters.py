"""Rich table formatters for CLI output."""

from decimal import Decimal
from typing import Mapping, Optional

from rich.table import Table

from positions.asset import Asset
from positions.expr import PriceTable, ValueExpression
from positions.instrument import Instrument
from positions.portfolio import Positions


def create_positions_table(portfolio: Positions, title: str = "Positions") -> Table:
    """
    Create a Rich table listing every position of a portfolio.

    Args:
        portfolio: Portfolio to display
        title: Table title

    Returns:
        Populated Rich Table
    """
    table = Table(title=title)
    table.add_column("Instrument", style="cyan", no_wrap=True)
    table.add_column("Side", style="white")
    table.add_column("Quantity", style="magenta", justify="right")
    table.add_column("Price", style="yellow", justify="right")
    table.add_column("Cost", style="dim", justify="right")

    for position in portfolio:
        side_style = "green" if position.side == "long" else "red"
        table.add_row(
            str(position.instrument),
            f"[{side_style}]{position.side}[/{side_style}]",
            str(position.quantity),
            str(position.price),
            str(position.cost),
        )
    return table


def create_holdings_table(holdings: Mapping[Asset, Decimal], title: str = "Holdings") -> Table:
    """Create a Rich table of amounts per asset (holdings or net balances)."""
    table = Table(title=title)
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Balance", style="magenta", justify="right")

    for asset, amount in holdings.items():
        table.add_row(str(asset), str(amount))
    return table


def create_expression_table(expr: ValueExpression) -> Table:
    """Create a Rich table with one row per denomination asset of an expression."""
    table = Table(title="Value Expression")
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for asset in expr.assets():
        table.add_row(str(asset), expr.render(asset))
    return table


def create_dependencies_table(
    instruments: list[Instrument],
    target: Asset,
    prices: Optional[PriceTable] = None,
) -> Table:
    """
    Create a Rich table of the instruments a valuation depends on.

    When prices are given, each row shows the supplied price or flags it as
    missing.
    """
    table = Table(title=f"Dependent Instruments ({target})")
    table.add_column("Instrument", style="cyan", no_wrap=True)
    if prices is not None:
        table.add_column("Price", style="yellow", justify="right")

    for instrument in instruments:
        if prices is None:
            table.add_row(str(instrument))
            continue
        price = prices.get(instrument.as_symbol())
        table.add_row(str(instrument), "[red]missing[/red]" if price is None else str(price))
    return table


def create_prices_table(prices: PriceTable) -> Table:
    """Create a Rich table of a price table."""
    table = Table(title="Prices")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Price", style="yellow", justify="right")

    for symbol, price in prices.items():
        table.add_row(str(symbol), str(price))
    return table
