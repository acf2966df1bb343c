"""
FILE: kanbo/cli/main.py
PURPOSE: Typer-based CLI for one-shot board commands
EXPORTS:
  - app (Typer application)
  - column_app (Typer sub-application for column commands)
  - main() (entry point)
  - get_store() -> BoardStore
  - check_result(result) -> Result
  - configure_logging(verbose) -> None
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - logging (stdlib)
  - kanbo.core.service (store wiring and lookups)
  - kanbo.repl (interactive mode)
NOTES:
  - Read commands support --json
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - Every command opens the store fresh, so each run sees the saved board
"""

import logging
import sys

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console

from ..core import service
from ..core.store import BoardStore, Result

# Typer app setup
app = typer.Typer(
    name="kanbo",
    help="Single-board terminal task tracker",
    add_completion=False,
)

# Column sub-command group
column_app = typer.Typer(
    name="column",
    help="Column management commands",
)
app.add_typer(column_app, name="column")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Version
from .. import __version__

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def get_store() -> BoardStore:
    """Open the persisted board (SQLite at repository.DB_PATH)."""
    return service.open_store()


def check_result(result: Result) -> Result:
    """Print the validation error and exit 1 if the store rejected the operation."""
    if not result.ok:
        error_console.print(f"[red]Error:[/red] {result.error}")
        raise typer.Exit(1)
    return result


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
):
    """
    Default callback - launches REPL when no command is specified.

    If a subcommand is invoked, this only configures logging.
    """
    configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        try:
            repl_main()
        except Exception as e:
            error_console.print(f"[red]Error starting REPL:[/red] {e}")
            raise typer.Exit(1)


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (
    # System commands
    version,
    repl,
    # Board commands
    show,
    rename,
    # Task commands
    add,
    edit,
    done,
    undone,
    rm,
    view,
    mv,
    # Column commands
    column_add,
    column_ls,
    column_rename,
    column_rm,
    column_mv,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
