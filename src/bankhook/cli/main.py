"""Main CLI application for Bankhook.

This module provides the unified entry point for all Bankhook CLI operations.
"""

import logging
from typing import Annotated

import typer

from ..logging import setup_logging
from .commands import record, serve

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="bankhook",
    help="Bankhook: Plaid Link, data relay and webhook demo server",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose debug logging",
        ),
    ] = False,
) -> None:
    """Global options for the Bankhook CLI."""
    setup_logging(cli_mode=True, verbose=verbose)


app.command("serve")(serve.serve)
app.command("status")(record.status)
app.command("reset")(record.reset)


def main() -> None:
    """Entry point for the Bankhook CLI application."""
    app()


if __name__ == "__main__":
    main()
