"""Helpers shared by CLI commands."""

from pathlib import Path

import click

from positions.system import LoggerFactory, SystemConfig, reload_system_config


def setup(config_path: Path | None) -> SystemConfig:
    """Load system configuration and install logging from it."""
    try:
        config = reload_system_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    LoggerFactory.configure(config.logging.to_logger_config())
    return config


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="System config YAML (default: config/positions.yaml or positions.yaml)",
)
