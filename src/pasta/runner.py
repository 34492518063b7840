# Copyright (c) Syntropy Systems
"""Foreground commands in their own process group."""
from __future__ import annotations

import contextlib
import ctypes
import logging
import os
import signal
import subprocess
import sys
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def _die_with_parent() -> None:
    """Ask Linux to SIGKILL the child when pasta-tasks dies."""
    try:
        libc = ctypes.CDLL("libc.so.6", use_errno=True)
        pr_set_pdeathsig = 1
        libc.prctl(pr_set_pdeathsig, signal.SIGKILL)
    except (AttributeError, OSError):
        return


class CommandRunner:
    """Run one command to completion, stopping its whole group on Ctrl-C.

    The child inherits the terminal. On interrupt the group gets SIGTERM,
    then SIGKILL once ``grace_period`` seconds have passed.
    """

    def __init__(
        self,
        argv: list[str],
        workdir: Path | None = None,
        grace_period: float = 10.0,
    ) -> None:
        self.argv = argv
        self.workdir = workdir
        self.grace_period = grace_period
        self.returncode: int | None = None
        self._process: subprocess.Popen[bytes] | None = None

    def start(self) -> None:
        """Launch the command.

        Raises:
            FileNotFoundError: If the executable does not exist.

        """
        self._process = subprocess.Popen(  # noqa: S603
            self.argv,
            cwd=str(self.workdir) if self.workdir is not None else None,
            start_new_session=True,
            preexec_fn=_die_with_parent if sys.platform == "linux" else None,  # noqa: PLW1509
        )
        logger.debug("Started pid %d: %s", self._process.pid, self.argv)

    @property
    def process(self) -> subprocess.Popen[bytes]:
        if self._process is None:
            msg = "Command has not been started"
            raise RuntimeError(msg)
        return self._process

    def wait(self) -> int:
        self.returncode = self.process.wait()
        return self.returncode

    def run(self) -> int:
        """Start the command and return its exit status.

        A KeyboardInterrupt while waiting stops the process group and is
        then re-raised.
        """
        self.start()
        try:
            return self.wait()
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping %s", self.argv[0])
            _ = self.terminate()
            raise

    def terminate(self) -> int:
        """Stop the process group: SIGTERM, then SIGKILL after the grace period.

        Returns:
            Exit status (negative signal number if killed)

        """
        process = self.process
        if process.poll() is None:
            self._signal_group(signal.SIGTERM)
            deadline = time.monotonic() + self.grace_period
            while process.poll() is None and time.monotonic() < deadline:
                time.sleep(0.05)
            if process.poll() is None:
                logger.warning("%s ignored SIGTERM, killing", self.argv[0])
                self._signal_group(signal.SIGKILL)
                _ = process.wait()
        self.returncode = process.returncode
        return self.returncode

    def _signal_group(self, signum: int) -> None:
        # The child leads its own session, so its pid is the group id
        with contextlib.suppress(ProcessLookupError):
            os.killpg(self.process.pid, signum)
