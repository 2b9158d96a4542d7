"""cachesync command-line interface."""

import click

from .. import __version__
from .candidates import candidates_cmd
from .manifest import manifest_cmd
from .sync import sync_cmd


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, message="%(version)s")
def cli() -> None:
    """Keep an R2 bucket in sync with the newest OpenRS2 OSRS cache.

    \b
    Settings come from the environment and from a .env file in the
    current directory; see "cachesync sync --help".
    """


@cli.command(hidden=True)
@click.pass_context
def help(ctx: click.Context) -> None:
    """Show usage information."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@cli.command("version")
def version_cmd() -> None:
    """Print the version number."""
    click.echo(__version__)


cli.add_command(sync_cmd)
cli.add_command(manifest_cmd)
cli.add_command(candidates_cmd)
