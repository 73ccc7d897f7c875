from __future__ import annotations

import logging
from typing import Annotated

import typer

from .base import configure_logging
from .commands.db import app as db_app

app = typer.Typer(
    help="litebase CLI",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(db_app, name="db")


@app.callback()
def root(
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Enable debug logging"),
    ] = False,
) -> None:
    """Single-connection SQLite access from the command line."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.

    Side Effects:
        - Processes CLI arguments and executes commands.
        - May exit with non-zero code on errors.
    """
    app()


if __name__ == "__main__":
    main()
