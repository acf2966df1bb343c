"""
FILE: kanbo/repl/commands/tasks.py
PURPOSE: Task command handlers for REPL
"""

from typing import List, Optional

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.exceptions import KanboError, InvalidInputError
from ...formatting import BoardFormatter


def flag_value(result: ParseResult, name: str) -> Optional[str]:
    """
    Return a value flag's text, or None if absent.

    Raises:
        InvalidInputError: If the flag was given without a value
    """
    value = result.flags.get(name)
    if value is True:
        raise InvalidInputError(f"--{name} needs a value")
    return value


def split_refs(args: List[str]) -> List[str]:
    """Task references from args, accepting '3,5,7' as well as '3 5 7'."""
    return [ref.strip() for arg in args for ref in arg.split(",") if ref.strip()]


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - create a task.

    Usage:
        add Buy groceries
        add "Fix login" --column "In Progress" -p high --due tomorrow
    """
    if not result.args:
        console.print("[red]Error:[/red] Task title required")
        console.print("[dim]Usage: add <title> [--column <col>] [-p <priority>] [--due <date>] [-d <desc>][/dim]")
        return

    title = " ".join(result.args)
    store = repl_context.get_store()

    try:
        state = store.get_state()
        column_ref = flag_value(result, "column")
        if column_ref:
            column = service.find_column_or_raise(state, column_ref)
        else:
            column = repl_context.current_column()
            if column is None:
                columns = state.ordered_columns()
                if not columns:
                    console.print("[red]Error:[/red] The board has no columns. Create one with: column add <name>")
                    return
                column = columns[0]

        priority = flag_value(result, "priority")
        due = flag_value(result, "due")
        outcome = store.add_task(
            column.id,
            title,
            description=flag_value(result, "desc"),
            priority=service.parse_priority(priority or ""),
            due_date=service.parse_due_date(due) if due else None,
        )
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    if not outcome.ok:
        console.print(f"[red]Error:[/red] {outcome.error}")
        return

    task = outcome.state.tasks[outcome.created_id]
    number = service.task_number(outcome.state, task.id)
    console.print(
        f"[green]✓ Created task [bold]#{number}[/bold] in [cyan]{escape(column.name)}[/cyan]:[/green] "
        f"{escape(task.title)}"
    )


def handle_edit_command(result: ParseResult) -> None:
    """
    Handle 'edit' command - change task fields.

    Usage:
        edit 3 New title
        edit 3 --priority low --due none
        edit 3 -d "Longer description"
    """
    if not result.args:
        console.print("[red]Error:[/red] Task number required")
        console.print("[dim]Usage: edit <task> [<title>] [-d <desc>] [-p <priority>] [--due <date>][/dim]")
        return

    store = repl_context.get_store()
    try:
        task = service.find_task_or_raise(store.get_state(), result.args[0])

        fields = {}
        if len(result.args) > 1:
            fields["title"] = " ".join(result.args[1:])
        if "desc" in result.flags:
            fields["description"] = flag_value(result, "desc")
        if "priority" in result.flags:
            fields["priority"] = service.parse_priority(flag_value(result, "priority"))
        if "due" in result.flags:
            fields["due_date"] = service.parse_due_date(flag_value(result, "due"))
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    if not fields:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    outcome = store.update_task(task.id, **fields)
    if not outcome.ok:
        console.print(f"[red]Error:[/red] {outcome.error}")
    elif outcome.changed:
        console.print(f"[green]✓ Updated:[/green] {escape(outcome.state.tasks[task.id].title)}")
    else:
        console.print("[dim]No changes[/dim]")


def _set_completed(result: ParseResult, completed: bool) -> None:
    refs = split_refs(result.args)
    if not refs:
        console.print("[red]Error:[/red] Task number required")
        return

    store = repl_context.get_store()
    state = store.get_state()
    verb = "Completed" if completed else "Reopened"

    for ref in refs:
        try:
            task = service.find_task_or_raise(state, ref)
        except KanboError as e:
            console.print(f"[red]Error:[/red] {e}")
            continue
        store.update_task(task.id, is_completed=completed)
        console.print(f"[green]✓[/green] {verb}: {escape(task.title)}")


def handle_done_command(result: ParseResult) -> None:
    """
    Handle 'done' command - mark task(s) complete.

    Usage:
        done 3
        done 3,5,7
    """
    _set_completed(result, True)


def handle_undone_command(result: ParseResult) -> None:
    """Handle 'undone' command - mark task(s) not complete."""
    _set_completed(result, False)


def handle_rm_command(result: ParseResult) -> None:
    """
    Handle 'rm' command - delete task(s).

    Usage:
        rm 3
        rm 3,5,7
    """
    refs = split_refs(result.args)
    if not refs:
        console.print("[red]Error:[/red] Task number required")
        return

    store = repl_context.get_store()
    state = store.get_state()

    # Resolve every ref before deleting: board numbers shift after each delete
    targets = []
    for ref in refs:
        try:
            targets.append(service.find_task_or_raise(state, ref))
        except KanboError as e:
            console.print(f"[red]Error:[/red] {e}")

    for task in targets:
        if store.delete_task(task.id).changed:
            console.print(f"[green]✓[/green] Deleted: {escape(task.title)}")


def handle_view_command(result: ParseResult) -> None:
    """
    Handle 'view' command - show every field of one task.

    Usage:
        view 3
    """
    if not result.args:
        console.print("[red]Error:[/red] Task number required")
        return

    state = repl_context.get_store().get_state()
    try:
        task = service.find_task_or_raise(state, result.args[0])
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(BoardFormatter.create_task_panel(
        task,
        service.column_of(state, task.id),
        service.task_number(state, task.id),
    ))


def handle_mv_command(result: ParseResult) -> None:
    """
    Handle 'mv' command - reposition a task within its column.

    Usage:
        mv 4 1          # Task #4 to the top of its column
    """
    if len(result.args) < 2 or not result.args[1].isdigit():
        console.print("[red]Error:[/red] Usage: mv <task> <position>")
        return

    store = repl_context.get_store()
    try:
        task = service.find_task_or_raise(store.get_state(), result.args[0])
    except KanboError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    outcome = store.move_task(task.id, int(result.args[1]) - 1)
    column = service.column_of(outcome.state, task.id)
    position = column.task_ids.index(task.id) + 1 if column else int(result.args[1])
    console.print(f"[green]✓ Moved[/green] {escape(task.title)} [dim]to position {position}[/dim]")
