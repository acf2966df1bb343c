"""
FILE: kanbo/repl/commands/board.py
PURPOSE: Board and column command handlers for REPL
"""

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.exceptions import KanboError
from ...formatting import BoardFormatter


def ask_confirmation(message: str) -> bool:
    """Ask user for confirmation (y/n)."""
    response = input(f"{message} (y/n): ").strip().lower()
    return response in ('y', 'yes')


def handle_show_command(result: ParseResult) -> None:
    """
    Handle 'show' command - render the board.

    Usage:
        show
        ls
    """
    state = repl_context.get_store().get_state()
    if not state.board.column_order:
        console.print(f"[bold cyan]{escape(state.board.name)}[/bold cyan]")
        console.print("[dim]No columns yet. Create one with: column add <name>[/dim]")
        return

    console.print(BoardFormatter.create_board_table(state))
    console.print(f"[dim]{BoardFormatter.summary_line(state)}[/dim]")


def handle_rename_command(result: ParseResult) -> None:
    """
    Handle 'rename' command - rename the board.

    Usage:
        rename Sprint 12
    """
    outcome = repl_context.get_store().update_board_name(" ".join(result.args))
    if not outcome.ok:
        console.print(f"[red]Error:[/red] {outcome.error}")
        return
    console.print(f"[green]✓ Board renamed to[/green] {escape(outcome.state.board.name)}")


def handle_use_command(result: ParseResult) -> None:
    """
    Handle 'use' command - pick the column that 'add' targets.

    Usage:
        use "In Progress"
        use none            # Back to the first column
    """
    if not result.args:
        column = repl_context.current_column()
        if column:
            console.print(f"Current column: [cyan]{escape(column.name)}[/cyan]")
        else:
            console.print("[dim]No column selected (new tasks go to the first column)[/dim]")
        return

    ref = " ".join(result.args)
    if ref.lower() in ("none", "clear"):
        repl_context.current_column_id = None
        console.print("✓ Cleared column selection")
        return

    try:
        column = service.find_column_or_raise(repl_context.get_store().get_state(), ref)
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    repl_context.current_column_id = column.id
    console.print(f"✓ New tasks go to [cyan]{escape(column.name)}[/cyan]")


def _column_add(result: ParseResult) -> None:
    outcome = repl_context.get_store().add_column(" ".join(result.args[1:]))
    if not outcome.ok:
        console.print(f"[red]Error:[/red] {outcome.error}")
        return
    column = outcome.state.columns[outcome.created_id]
    console.print(f"[green]✓ Created column:[/green] {escape(column.name)}")


def _column_ls(result: ParseResult) -> None:
    state = repl_context.get_store().get_state()
    if not state.board.column_order:
        console.print("[dim]No columns found[/dim]")
        return
    console.print(BoardFormatter.create_columns_table(state))


def _column_rename(result: ParseResult) -> None:
    if len(result.args) < 3:
        console.print("[red]Error:[/red] Usage: column rename <column> <new name>")
        return

    store = repl_context.get_store()
    try:
        column = service.find_column_or_raise(store.get_state(), result.args[1])
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    outcome = store.update_column_name(column.id, " ".join(result.args[2:]))
    if not outcome.ok:
        console.print(f"[red]Error:[/red] {outcome.error}")
        return
    console.print(f"[green]✓ Renamed column to[/green] {escape(outcome.state.columns[column.id].name)}")


def _column_rm(result: ParseResult) -> None:
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Usage: column rm <column> [--yes]")
        return

    store = repl_context.get_store()
    try:
        column = service.find_column_or_raise(store.get_state(), " ".join(result.args[1:]))
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    task_count = len(column.task_ids)
    if task_count and not result.flags.get("yes"):
        if not ask_confirmation(f"Delete column '{column.name}' and its {task_count} task(s)?"):
            console.print("[dim]Cancelled[/dim]")
            return

    store.delete_column(column.id)
    if repl_context.current_column_id == column.id:
        repl_context.current_column_id = None
    console.print(f"[green]✓ Deleted column:[/green] {escape(column.name)} [dim]({task_count} task(s) removed)[/dim]")


def _column_mv(result: ParseResult) -> None:
    if len(result.args) < 3 or not result.args[2].isdigit():
        console.print("[red]Error:[/red] Usage: column mv <column> <position>")
        return

    store = repl_context.get_store()
    try:
        column = service.find_column_or_raise(store.get_state(), result.args[1])
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    outcome = store.move_column(column.id, int(result.args[2]) - 1)
    position = outcome.state.board.column_order.index(column.id) + 1
    console.print(f"[green]✓ Moved column[/green] {escape(column.name)} [dim]to position {position}[/dim]")


COLUMN_SUBCOMMANDS = {
    "add": _column_add,
    "ls": _column_ls,
    "rename": _column_rename,
    "rm": _column_rm,
    "mv": _column_mv,
}


def handle_column_command(result: ParseResult) -> None:
    """
    Handle 'column' command - dispatch to column subcommands.

    Usage:
        column add <name>
        column ls
        column rename <column> <new name>
        column rm <column> [--yes]
        column mv <column> <position>
    """
    if not result.args:
        _column_ls(result)
        return

    subcommand = COLUMN_SUBCOMMANDS.get(result.args[0].lower())
    if subcommand is None:
        console.print(f"[red]Unknown column command:[/red] {result.args[0]}")
        console.print(f"[dim]Available: {', '.join(COLUMN_SUBCOMMANDS)}[/dim]")
        return

    subcommand(result)
