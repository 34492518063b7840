# Copyright (c) Syntropy Systems
"""The project's install, learn and clean tasks."""
from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from pasta.tasks.registry import TaskRegistry

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pasta.config import TasksConfig
    from pasta.tasks.shell import Shell

logger = logging.getLogger(__name__)


def install_command(config: TasksConfig, environ: dict[str, str] | None = None) -> list[str]:
    """Build the `zig build install` command line."""
    argv = ["zig", "build", "install"]
    release = config.build.release_flag()
    if release is not None:
        argv.append(release)
    argv += ["--prefix-exe-dir", str(config.build.bin_dir(environ))]
    return argv


def learn_commands(config: TasksConfig) -> list[list[str]]:
    """Build one `pasta` command line per configured dataset."""
    commands = []
    for dataset in config.learn.datasets:
        rounds = dataset.rounds if dataset.rounds is not None else config.learn.rounds
        commands.append(
            ["pasta", "-i", dataset.input, "-o", dataset.output, "-r", str(rounds)]
        )
    return commands


def remove_tree(path: Path) -> bool:
    """Remove a directory tree; return whether anything was removed."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False


def build_registry(
    config: TasksConfig,
    shell: Shell,
    environ: dict[str, str] | None = None,
    list_tasks: Callable[[TaskRegistry], None] | None = None,
) -> TaskRegistry:
    """Define the project tasks.

    Args:
        config: Loaded project configuration
        shell: Runs a command, raising on failure
        environ: Environment used to resolve the install root
        list_tasks: Action of the default task; receives the registry

    """
    registry = TaskRegistry()

    @registry.task("install", description="Install")
    def install() -> None:
        shell(install_command(config, environ))

    @registry.task("learn", description="Learn", prerequisites=["install"])
    def learn() -> None:
        for argv in learn_commands(config):
            shell(argv)

    @registry.task("clean", description="Clean")
    def clean() -> None:
        for name in config.clean:
            path = config.root / name
            if remove_tree(path):
                logger.info("Removed %s", path)
            else:
                logger.debug("Nothing to remove at %s", path)

    if list_tasks is not None:
        _ = registry.define("default", lambda: list_tasks(registry))

    return registry
