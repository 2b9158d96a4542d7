"""Manifest command."""

import click
import requests
from rich.console import Console
from rich.table import Table

from ..bucket import ManifestReader
from ..config import DEFAULT_PUBLIC_URL
from .scope import command_scope, verbose_option


@click.command("manifest")
@click.option(
    "--public-url",
    envvar="R2_PUBLIC_URL",
    default=DEFAULT_PUBLIC_URL,
    show_default=True,
    help="Public base URL of the bucket",
)
@verbose_option
def manifest_cmd(public_url: str, verbose: bool) -> None:
    """Show the published caches.json manifest."""
    with command_scope(verbose):
        entries = ManifestReader(session=requests.Session(), public_url=public_url).read()
        if not entries:
            click.echo("No published caches.")
            return

        table = Table()
        table.add_column("Name", no_wrap=True)
        table.add_column("Environment")
        table.add_column("Revision", justify="right")
        table.add_column("Timestamp")
        table.add_column("Size", justify="right")
        for entry in entries:
            size = "" if entry.size is None else str(entry.size)
            table.add_row(entry.name, entry.environment, str(entry.revision), entry.timestamp, size)
        Console().print(table)
