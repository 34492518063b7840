# Copyright (c) Syntropy Systems
"""Running shell commands from tasks."""
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Callable

from rich.console import Console

from pasta.errors import CommandFailedError
from pasta.runner import CommandRunner

logger = logging.getLogger(__name__)

# Exit status shells report for a missing executable
COMMAND_NOT_FOUND = 127

Shell = Callable[[list[str]], None]


class Sh:
    """Echo and run commands, failing on a non-zero exit status.

    Commands run without a shell, in ``workdir``. With ``dry_run`` set the
    commands are only echoed.
    """

    def __init__(
        self,
        workdir: Path | None = None,
        dry_run: bool = False,  # noqa: FBT001, FBT002
        kill_grace_period: float = 10.0,
        console: Console | None = None,
    ) -> None:
        self.workdir = workdir
        self.dry_run = dry_run
        self.kill_grace_period = kill_grace_period
        self.console = console or Console()

    def __call__(self, argv: list[str]) -> None:
        command_display = shlex.join(argv)
        self.console.print(command_display, markup=False, highlight=False)
        if self.dry_run:
            logger.debug("Dry run, skipping: %s", command_display)
            return

        runner = CommandRunner(argv, workdir=self.workdir, grace_period=self.kill_grace_period)
        try:
            code = runner.run()
        except FileNotFoundError as e:
            logger.debug("Executable not found: %s", e)
            raise CommandFailedError(argv, COMMAND_NOT_FOUND) from e

        if code != 0:
            raise CommandFailedError(argv, code)


def sh(
    argv: list[str],
    workdir: Path | None = None,
    kill_grace_period: float = 10.0,
) -> None:
    """Run a command and raise CommandFailedError on a non-zero exit status."""
    Sh(workdir=workdir, kill_grace_period=kill_grace_period)(argv)
