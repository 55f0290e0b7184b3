"""styledshift CLI entry point: Click group with subcommands."""

import logging
import sys

import click

from styledshift import __version__
from styledshift.config import ConfigError, LoweringConfig


@click.group()
@click.version_option(version=__version__, prog_name="styledshift")
@click.option("--verbose", "-v", is_flag=True, help="Log lowering decisions to stderr.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with theme tokens, helper calls and selector mappings.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """styledshift - lower styled-components templates into StyleX styles."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = LoweringConfig()
    if config_path:
        try:
            config = LoweringConfig.from_file(config_path)
        except ConfigError as exc:
            click.echo(f"Config error: {exc}", err=True)
            sys.exit(1)
    ctx.obj = config


# Import and register subcommands
from styledshift.cli.check import check  # noqa: E402
from styledshift.cli.inspect import inspect  # noqa: E402
from styledshift.cli.lower import lower  # noqa: E402

cli.add_command(lower)
cli.add_command(check)
cli.add_command(inspect)
