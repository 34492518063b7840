# Copyright (c) Syntropy Systems
"""Logging setup shared by the command line tools."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:  # noqa: FBT001, FBT002
    """Route pasta's loggers through rich.

    Verbose selects DEBUG for pasta's own loggers, otherwise WARNING.
    """
    logger = logging.getLogger("pasta")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
