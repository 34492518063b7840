# Copyright (c) Syntropy Systems
"""pasta-tasks doctor command."""

import shutil

from rich.console import Console

from pasta.config import CONFIG_FILENAME, find_config_file, load_config
from pasta.errors import ConfigError

console = Console()


def doctor() -> None:
    """Check the project setup and diagnose issues.

    Verifies:
    - pasta.yaml is found and valid
    - the install root environment variable is set
    - zig and pasta are on PATH
    - every dataset input exists
    """
    issues: list[str] = []
    warnings: list[str] = []

    # Check config file
    config_path = find_config_file()
    if config_path is None:
        console.print(f"[dim]•[/dim] No {CONFIG_FILENAME} found, using defaults")
    else:
        console.print(f"[green]✓[/green] Config: {config_path}")

    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]✗[/red] Invalid config: {e}")
        console.print()
        console.print("[red]Found 1 issue(s)[/red]")
        return

    console.print(f"[green]✓[/green] Build mode: {config.build.mode}")

    # Check install root
    try:
        bin_dir = config.build.bin_dir()
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        issues.append(f"${config.build.prefix_env} not set")
    else:
        if bin_dir.is_dir():
            console.print(f"[green]✓[/green] Install directory: {bin_dir}")
        else:
            console.print(f"[yellow]⚠[/yellow] Install directory missing: {bin_dir}")
            warnings.append("Install directory missing")

    # Check tools
    for tool in ("zig", "pasta"):
        path = shutil.which(tool)
        if path:
            console.print(f"[green]✓[/green] {tool}: {path}")
        else:
            console.print(f"[yellow]⚠[/yellow] {tool} not found on PATH")
            warnings.append(f"{tool} not found")

    # Check dataset inputs
    for dataset in config.learn.datasets:
        source = config.root / dataset.input
        if source.is_file():
            console.print(f"[green]✓[/green] Dataset: {dataset.input}")
        else:
            console.print(f"[red]✗[/red] Dataset not found: {dataset.input}")
            issues.append(f"Missing dataset {dataset.input}")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
    elif warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
