"""positions CLI main entry point."""

import click

from positions import __version__
from positions.cli.commands import demo_command, deps_command, eval_command


@click.group()
@click.version_option(version=__version__)
def main():
    """positions - Portfolio position algebra and valuation"""
    pass


# Register commands
main.add_command(demo_command)
main.add_command(deps_command)
main.add_command(eval_command)


if __name__ == "__main__":
    main()
