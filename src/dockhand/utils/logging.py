"""Logging setup for the dockhand CLI."""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

QUIET_LOGGERS = ("asyncio", "httpx", "httpcore")


def setup_logging(level: str = "INFO"):
    """Configure the root logger on stderr.

    stdout carries the summaries, so logs never go there. On a terminal
    records are rendered by rich; otherwise (journald, pipes, CI) they use
    a plain timestamped line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if sys.stderr.isatty():
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter('%(message)s', datefmt='[%X]'))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
