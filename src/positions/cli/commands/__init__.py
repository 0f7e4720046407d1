"""CLI commands."""

from positions.cli.commands.demo import demo_command
from positions.cli.commands.valuation import deps_command, eval_command

__all__ = [
    "demo_command",
    "deps_command",
    "eval_command",
]
