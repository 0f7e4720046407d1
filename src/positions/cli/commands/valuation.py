"""Valuation commands - thin CLI orchestration over the engine."""

import sys
from decimal import localcontext
from pathlib import Path

import click
from rich.console import Console

from positions.asset import Asset
from positions.cli.commands._common import config_option, setup
from positions.cli.ui import (
    create_dependencies_table,
    create_expression_table,
    create_holdings_table,
    create_positions_table,
)
from positions.errors import EvalError, InvalidAssetCode
from positions.loaders import load_portfolio, load_price_table
from positions.system import LoggerFactory

portfolio_option = click.option(
    "--portfolio",
    "portfolio_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Portfolio YAML document",
)
target_option = click.option("--target", default=None, help="Asset to value in (default: valuation.target)")
inverse_option = click.option(
    "--allow-inverse/--no-allow-inverse",
    default=None,
    help="Convert against an instrument's direction by dividing by its price",
)


def _parse_target(console: Console, text: str) -> Asset:
    try:
        return Asset.parse(text)
    except InvalidAssetCode as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.command("deps")
@portfolio_option
@target_option
@inverse_option
@config_option
def deps_command(
    portfolio_path: Path,
    target: str | None,
    allow_inverse: bool | None,
    config_path: Path | None,
):
    """
    List the instruments whose prices a valuation needs.

    Example:
        positions deps --portfolio portfolio.yaml --target CAD
    """
    console = Console()
    config = setup(config_path)
    target_asset = _parse_target(console, target or config.valuation.target)
    inverse = config.valuation.allow_inverse if allow_inverse is None else allow_inverse

    try:
        portfolio = load_portfolio(portfolio_path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    instruments = portfolio.as_expr().instruments(target_asset, allow_inverse=inverse)
    console.print(create_dependencies_table(instruments, target_asset))


@click.command("eval")
@portfolio_option
@click.option(
    "--prices",
    "prices_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Price table YAML document (SYMBOL: price)",
)
@target_option
@inverse_option
@click.option("--verbose", "-v", is_flag=True, help="Show positions, holdings and the value expression")
@config_option
def eval_command(
    portfolio_path: Path,
    prices_path: Path,
    target: str | None,
    allow_inverse: bool | None,
    verbose: bool,
    config_path: Path | None,
):
    """
    Evaluate portfolio equity in a target asset.

    Example:
        positions eval --portfolio portfolio.yaml --prices prices.yaml --target CAD
    """
    console = Console()
    config = setup(config_path)
    logger = LoggerFactory.get_logger()
    target_asset = _parse_target(console, target or config.valuation.target)
    inverse = config.valuation.allow_inverse if allow_inverse is None else allow_inverse

    try:
        portfolio = load_portfolio(portfolio_path)
        prices = load_price_table(prices_path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    expr = portfolio.as_expr()
    if verbose:
        console.print(create_positions_table(portfolio))
        console.print(create_holdings_table(portfolio.holdings()))
        console.print(create_holdings_table(portfolio.balances(), title="Net Balances"))
        console.print(create_expression_table(expr))
        console.print(create_dependencies_table(expr.instruments(target_asset, allow_inverse=inverse), target_asset, prices))

    try:
        with localcontext() as ctx:
            ctx.prec = config.valuation.precision
            equity = expr.eval(target_asset, prices, allow_inverse=inverse)
    except EvalError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    logger.info("valuation.completed", target=str(target_asset), equity=str(equity))
    console.print(f"\n[bold]Equity:[/bold] [green]{equity} {target_asset}[/green]")
