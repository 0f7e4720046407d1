"""CLI UI components - Rich table formatters."""

from positions.cli.ui.formatters import (
    create_dependencies_table,
    create_expression_table,
    create_holdings_table,
    create_positions_table,
    create_prices_table,
)

__all__ = [
    "create_positions_table",
    "create_holdings_table",
    "create_expression_table",
    "create_dependencies_table",
    "create_prices_table",
]
