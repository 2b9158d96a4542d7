"""Plumbing shared by every cachesync command."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from .interceptor import Interceptor
from .logger import configure_logging

verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log debug messages, including the traceback of a failure",
)


@contextmanager
def command_scope(verbose: bool) -> Iterator[Interceptor]:
    """
    Run the body of a command with logging configured and failures intercepted.

    Use inside a click command decorated with `verbose_option`:

        with command_scope(verbose):
            do_work()

    A failure of the body is logged and the command exits with status 1.
    Returning early from the body is a success.
    """
    configure_logging(verbose)
    interceptor = Interceptor()
    with interceptor:
        yield interceptor
    if interceptor.failed:
        raise SystemExit(interceptor.exitcode())
