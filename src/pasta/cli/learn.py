# Copyright (c) Syntropy Systems
"""pasta learn command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pasta.config import load_config
from pasta.errors import PastaError
from pasta.learn import LearnSettings, Model, learn
from pasta.log import configure_logging
from pasta.output import OutputRun
from pasta.records import RecordSet, load_records

console = Console()


def learn_command(
    input_path: Path = typer.Option(
        ...,
        "--input", "-i",
        help="CSV record file (first column holds record identifiers)",
    ),
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output directory for the run",
    ),
    rounds: Optional[int] = typer.Option(
        None,
        "--rounds", "-r",
        help="Number of learning rounds (restarts)",
    ),
    clusters: Optional[int] = typer.Option(
        None,
        "--clusters", "-k",
        help="Number of clusters",
    ),
    max_iter: Optional[int] = typer.Option(
        None,
        "--max-iter",
        help="Maximum k-means iterations per round",
    ),
    tol: Optional[float] = typer.Option(
        None,
        "--tol",
        help="Relative tolerance on centroid movement for convergence",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducible runs",
    ),
    id_column: Optional[str] = typer.Option(
        None,
        "--id-column",
        help="Column holding record identifiers (default: first column)",
    ),
    standardize: bool = typer.Option(
        True,
        "--standardize/--no-standardize",
        help="Z-score features before clustering",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every round",
    ),
) -> None:
    """Learn clusters from a CSV record file.

    Example:

        pasta -i 5de-jaar.csv -o 5de-jaar -r 1000
    """
    configure_logging(verbose)

    try:
        defaults = load_config().learn
        settings = LearnSettings(
            rounds=rounds if rounds is not None else defaults.rounds,
            clusters=clusters if clusters is not None else defaults.clusters,
            max_iter=max_iter if max_iter is not None else defaults.max_iter,
            tol=tol if tol is not None else defaults.tol,
            seed=seed,
            standardize=standardize,
        )
        records = load_records(input_path, id_column=id_column)
        settings.validate(len(records))

        with OutputRun(output, input_path, settings=settings.to_dict()) as run:
            model = learn(records, settings, on_round=run.log_round)
            run.save_model(model, records)
            run.summary({
                "records": len(records),
                "features": records.n_features,
                "clusters": model.clusters,
                "best_round": model.best_round,
                "inertia": model.inertia,
            })
    except PastaError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    _print_summary(records, model, output)


def _print_summary(records: RecordSet, model: Model, output: Path) -> None:
    """Print a table describing the learned model."""
    console.print(f"[green]Learned {model.clusters} clusters[/green] from {len(records)} records")
    console.print(f"  [dim]features:[/dim] {records.n_features} ({escape(', '.join(records.feature_names))})")
    console.print(f"  [dim]rounds:[/dim] {model.rounds} (best: {model.best_round})")
    console.print(f"  [dim]inertia:[/dim] {model.inertia:.6g}")
    console.print(f"  [dim]output:[/dim] {output}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Cluster", style="cyan", justify="right")
    table.add_column("Size", justify="right")
    for name in model.feature_names:
        table.add_column(name, justify="right")

    for index, (size, centroid) in enumerate(zip(model.cluster_sizes(), model.centroids)):
        table.add_row(str(index), str(size), *(f"{value:.4g}" for value in centroid))

    console.print(table)