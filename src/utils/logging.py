"""Logging configuration."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("keystoneauth", "openstack", "stevedore", "urllib3")


def setup_logging(level: str = "WARNING", verbose: bool = False, console: Optional[Console] = None) -> None:
    """Configure root logging with a Rich handler on stderr.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Show timestamps, module paths and SDK debug output
        console: Console to log to (default: a stderr console)
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
    )

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    sdk_level = logging.DEBUG if verbose else max(numeric_level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
