# Copyright (c) Syntropy Systems
"""pasta-tasks: build, learn and clean the project."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from pasta.cli.doctor import doctor
from pasta.config import load_config
from pasta.errors import PastaError
from pasta.log import configure_logging
from pasta.tasks.project import build_registry
from pasta.tasks.registry import TaskRegistry
from pasta.tasks.shell import Sh

console = Console()

app = typer.Typer(
    name="pasta-tasks",
    help="Build the project, learn its datasets and clean up.",
    add_completion=False,
)


@dataclass
class TaskOptions:
    """Options shared by every task command."""

    dry_run: bool = False


def _print_tasks(registry: TaskRegistry) -> None:
    """List described tasks, like `rake -T`."""
    described = registry.describe()
    width = max((len(name) for name, _ in described), default=0)
    for name, description in described:
        console.print(f"pasta-tasks {name.ljust(width)}  [dim]# {description}[/dim]")


def _invoke(ctx: typer.Context, name: str, mode: str | None = None) -> None:
    """Invoke a task by name, reporting failures as exit status 1."""
    options = ctx.obj if isinstance(ctx.obj, TaskOptions) else TaskOptions()

    try:
        config = load_config()
        if mode is not None:
            config.build.set_mode(mode)
        shell = Sh(
            workdir=config.root,
            dry_run=options.dry_run,
            kill_grace_period=config.kill_grace_period,
            console=console,
        )
        registry = build_registry(config, shell, list_tasks=_print_tasks)
        _ = registry.invoke(name)
    except PastaError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run", "-n",
        help="Print commands without running them",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log task progress",
    ),
) -> None:
    """Run a project task. Without a task, list the tasks."""
    configure_logging(verbose)
    ctx.obj = TaskOptions(dry_run=dry_run)
    if ctx.invoked_subcommand is None:
        _invoke(ctx, "default")


@app.command()
def install(
    ctx: typer.Context,
    mode: Optional[str] = typer.Option(
        None,
        "--mode", "-m",
        help="Build mode: safe, fast or debug (default: from pasta.yaml)",
    ),
) -> None:
    """Install: build and install the executables."""
    _invoke(ctx, "install", mode=mode)


@app.command()
def learn(
    ctx: typer.Context,
    mode: Optional[str] = typer.Option(
        None,
        "--mode", "-m",
        help="Build mode for the install step",
    ),
) -> None:
    """Learn: install, then run pasta on every dataset."""
    _invoke(ctx, "learn", mode=mode)


@app.command()
def clean(ctx: typer.Context) -> None:
    """Clean: remove build directories."""
    _invoke(ctx, "clean")


@app.command(name="list")
def list_tasks(ctx: typer.Context) -> None:
    """List the available tasks."""
    _invoke(ctx, "default")


_ = app.command()(doctor)


if __name__ == "__main__":
    app()
