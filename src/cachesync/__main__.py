"""Allow running the CLI with `python -m cachesync`."""

from .cli import cli

cli()
