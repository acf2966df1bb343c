"""
FILE: kanbo/cli/commands/board.py
PURPOSE: Board commands (show, rename)
"""

import typer
from rich.markup import escape

from ..main import app, console, error_console, get_store, check_result
from ...core.exceptions import KanboError
from ...formatting import BoardFormatter


@app.command()
def show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the board: every column with its tasks.

    Example:
        kanbo show
        kanbo show --json
    """
    try:
        state = get_store().get_state()
    except KanboError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(BoardFormatter.board_to_json(state))
        return

    if not state.board.column_order:
        console.print(f"[bold cyan]{escape(state.board.name)}[/bold cyan]")
        console.print("[dim]No columns yet. Create one with: kanbo column add <name>[/dim]")
        return

    console.print(BoardFormatter.create_board_table(state))
    console.print(f"\n[dim]{BoardFormatter.summary_line(state)}[/dim]")


@app.command()
def rename(
    name: str = typer.Argument(..., help="New board name"),
):
    """
    Rename the board.

    Example:
        kanbo rename "Sprint 12"
    """
    result = check_result(get_store().update_board_name(name))
    console.print(f"[green]✓ Board renamed to[/green] {escape(result.state.board.name)}")
