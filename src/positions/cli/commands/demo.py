"""Demo command - the MX/USD/CAD portfolio walkthrough."""

import sys
from decimal import Decimal

import click
from rich.console import Console

from positions.asset import USD, Asset
from positions.cli.commands._common import config_option, setup
from positions.cli.ui import (
    create_dependencies_table,
    create_expression_table,
    create_holdings_table,
    create_positions_table,
    create_prices_table,
)
from positions.errors import EvalError, InvalidAssetCode
from positions.instrument import Instrument
from positions.portfolio import Positions


def build_demo_portfolio() -> Positions:
    """Three spot trades across MX, USD and CAD."""
    mx = Asset.parse("MX")
    cad = Asset.parse("CAD")

    portfolio = Positions()

    # Buy 50 MX with 1000 USD
    portfolio += Instrument.spot(mx, USD).position(Decimal("1000") / Decimal("50"), Decimal("50"))

    # Buy 6 USD at 0.06 MX each, as a hedge
    portfolio += Instrument.spot(USD, mx).position(Decimal("6") / Decimal("100"), Decimal("6"))

    # Buy 10 MX with 3 CAD
    portfolio += Instrument.spot(mx, cad).position(Decimal("3") / Decimal("10"), Decimal("10"))

    return portfolio


def build_demo_prices() -> dict:
    """Prices after MX appreciated against USD and depreciated against CAD."""
    mx = Asset.parse("MX")
    cad = Asset.parse("CAD")

    mx_usd_price = Decimal("1500") / Decimal("50")
    mx_cad_price = Decimal("2") / Decimal("10")
    usd_cad_price = mx_usd_price / mx_cad_price

    return {
        Instrument.spot(mx, USD).as_symbol(): mx_usd_price,
        Instrument.spot(USD, mx).as_symbol(): Decimal("1") / mx_usd_price,
        Instrument.spot(mx, cad).as_symbol(): mx_cad_price,
        Instrument.spot(USD, cad).as_symbol(): usd_cad_price,
    }


@click.command("demo")
@click.option("--target", default="CAD", show_default=True, help="Asset to value the demo portfolio in")
@click.option(
    "--allow-inverse/--no-allow-inverse",
    default=None,
    help="Convert against an instrument's direction by dividing by its price",
)
@config_option
def demo_command(target: str, allow_inverse: bool | None, config_path):
    """
    Walk through building, lowering and valuing a small FX portfolio.

    Example:
        positions demo
        positions demo --target USD --allow-inverse
    """
    console = Console()
    config = setup(config_path)
    try:
        target_asset = Asset.parse(target)
    except InvalidAssetCode as e:
        raise click.BadParameter(str(e), param_hint="--target")
    inverse = config.valuation.allow_inverse if allow_inverse is None else allow_inverse

    portfolio = build_demo_portfolio()
    prices = build_demo_prices()

    console.print(create_positions_table(portfolio, title="Initial Portfolio"))
    console.print(create_holdings_table(portfolio.holdings()))
    console.print(create_holdings_table(portfolio.balances(), title="Net Balances"))

    expr = portfolio.as_expr()
    console.print(create_expression_table(expr))

    instruments = expr.instruments(target_asset, allow_inverse=inverse)
    console.print(create_dependencies_table(instruments, target_asset, prices))
    console.print(create_prices_table(prices))

    try:
        equity = expr.eval(target_asset, prices, allow_inverse=inverse)
    except EvalError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    console.print(f"\n[bold]Equity:[/bold] [green]{equity} {target_asset}[/green]")
