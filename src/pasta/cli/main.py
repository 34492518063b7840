# Copyright (c) Syntropy Systems
"""Main CLI entry point for pasta."""

import typer

from pasta.cli.learn import learn_command

app = typer.Typer(
    name="pasta",
    help="Learn clusters from CSV records over repeated rounds.",
    no_args_is_help=True,
    add_completion=False,
)

# A single command, so `pasta -i ... -o ... -r ...` runs it directly
_ = app.command(name="learn")(learn_command)


if __name__ == "__main__":
    app()
