# Copyright (c) Syntropy Systems
"""Exception hierarchy for pasta."""
from __future__ import annotations

import shlex


class PastaError(Exception):
    """Base class for errors reported to the user."""


class ConfigError(PastaError):
    """Invalid or incomplete project configuration."""


class RecordError(PastaError):
    """A record file could not be loaded."""


class LearnError(PastaError):
    """Learning settings do not fit the records."""


class OutputError(PastaError):
    """The output directory could not be written."""


class TaskError(PastaError):
    """Base class for task registry errors."""


class TaskNotFoundError(TaskError):
    """No task is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Don't know how to build task '{name}'")


class TaskCycleError(TaskError):
    """Task prerequisites form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' => '.join(cycle)}")


class CommandFailedError(PastaError):
    """A shell command exited with a non-zero status."""

    def __init__(self, argv: list[str], returncode: int) -> None:
        self.argv = argv
        self.returncode = returncode
        super().__init__(
            f"Command failed with status ({returncode}): {shlex.join(argv)}"
        )
