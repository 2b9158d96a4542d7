"""Logging setup for the cachesync CLI."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "bold_yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red,bg_white",
}

FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATEFMT = "%H:%M:%S"

# boto3 and friends log every request at DEBUG level.
_QUIET_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def _use_color() -> bool:
    return os.getenv("NO_COLOR") is None and sys.stderr.isatty()


def _formatter() -> logging.Formatter:
    if _use_color():
        return colorlog.ColoredFormatter(
            fmt="%(log_color)s" + FORMAT,
            datefmt=DATEFMT,
            log_colors=LOG_COLORS,
        )
    return logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)


def configure_logging(verbose: bool) -> None:
    """Log to stderr at INFO level, or DEBUG when verbose, replacing earlier handlers."""
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter())
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[handler],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
