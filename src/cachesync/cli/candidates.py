"""Candidates command."""

import click
import requests
from rich.console import Console

from ..config import DEFAULT_OPENRS2_URL
from ..openrs2 import list_candidates
from .scope import command_scope, verbose_option


@click.command("candidates")
@click.option(
    "--openrs2-url",
    envvar="OPENRS2_URL",
    default=DEFAULT_OPENRS2_URL,
    show_default=True,
    help="Base URL of the OpenRS2 archive",
)
@click.option("-n", "--limit", default=10, show_default=True, help="Number of candidates to show")
@verbose_option
def candidates_cmd(openrs2_url: str, limit: int, verbose: bool) -> None:
    """List the upstream caches eligible for publishing, newest first."""
    with command_scope(verbose):
        found = list_candidates(requests.Session(), openrs2_url=openrs2_url.rstrip("/"))
        if not found:
            click.echo("No candidates.")
            return
        console = Console()
        for desc in found[:limit]:
            console.print(f"[green]{desc.name()}[/] id={desc.id} size={desc.size}")
