"""
FILE: kanbo/cli/commands/columns.py
PURPOSE: Column commands (column add, ls, rename, rm, mv)
"""

import typer
from rich.markup import escape

from ..main import column_app, console, error_console, get_store, check_result
from ...core import service
from ...core.exceptions import KanboError
from ...formatting import BoardFormatter


@column_app.command("add")
def column_add(
    name: str = typer.Argument(..., help="Column name"),
):
    """
    Add a column to the right end of the board.

    Example:
        kanbo column add "In Progress"
    """
    result = check_result(get_store().add_column(name))
    column = result.state.columns[result.created_id]
    console.print(f"[green]✓ Created column:[/green] {escape(column.name)} [dim]({column.id})[/dim]")


@column_app.command("ls")
def column_ls():
    """
    List columns in board order.

    Example:
        kanbo column ls
    """
    state = get_store().get_state()
    if not state.board.column_order:
        console.print("[dim]No columns found[/dim]")
        return
    console.print(BoardFormatter.create_columns_table(state))


@column_app.command("rename")
def column_rename(
    column_ref: str = typer.Argument(..., help="Column name, number or id"),
    name: str = typer.Argument(..., help="New column name"),
):
    """
    Rename a column.

    Example:
        kanbo column rename "To Do" Backlog
    """
    try:
        store = get_store()
        column = service.find_column_or_raise(store.get_state(), column_ref)
    except KanboError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = check_result(store.update_column_name(column.id, name))
    console.print(
        f"[green]✓ Renamed column[/green] {escape(column.name)} → "
        f"{escape(result.state.columns[column.id].name)}"
    )


@column_app.command("rm")
def column_rm(
    column_ref: str = typer.Argument(..., help="Column name, number or id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """
    Delete a column and every task in it.

    Example:
        kanbo column rm Done
        kanbo column rm 3 --yes
    """
    try:
        store = get_store()
        column = service.find_column_or_raise(store.get_state(), column_ref)
    except KanboError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    task_count = len(column.task_ids)
    if not yes and task_count:
        typer.confirm(
            f"Delete column '{column.name}' and its {task_count} task(s)?",
            abort=True,
        )

    store.delete_column(column.id)
    console.print(
        f"[green]✓ Deleted column:[/green] {escape(column.name)} "
        f"[dim]({task_count} task(s) removed)[/dim]"
    )


@column_app.command("mv")
def column_mv(
    column_ref: str = typer.Argument(..., help="Column name, number or id"),
    position: int = typer.Argument(..., help="New 1-based position on the board"),
):
    """
    Move a column left or right on the board.

    Example:
        kanbo column mv Done 1
    """
    try:
        store = get_store()
        column = service.find_column_or_raise(store.get_state(), column_ref)
    except KanboError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = check_result(store.move_column(column.id, position - 1))
    index = result.state.board.column_order.index(column.id) + 1
    console.print(f"[green]✓ Moved column[/green] {escape(column.name)} [dim]to position {index}[/dim]")
