"""
FILE: kanbo/cli/commands/tasks.py
PURPOSE: Task commands (add, edit, done, undone, rm, view, mv)
"""

from typing import List, Optional

import typer
from rich.markup import escape

from ..main import app, console, error_console, get_store, check_result
from ...core import service
from ...core.exceptions import (
    KanboError,
    InvalidInputError,
    TaskNotFoundError,
    ColumnNotFoundError,
)
from ...formatting import BoardFormatter


def _split_refs(task_refs: str) -> List[str]:
    """Split comma-separated task references, dropping empty entries."""
    return [ref.strip() for ref in task_refs.split(",") if ref.strip()]


@app.command()
def add(
    title: str = typer.Argument(..., help="Task title"),
    column_ref: Optional[str] = typer.Option(None, "--column", "-c", help="Column name, number or id (default: first column)"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="Task description"),
    priority: str = typer.Option("none", "--priority", "-p", help="none, low, medium or high"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date: YYYY-MM-DD, today, tomorrow or +N"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a new task at the bottom of a column.

    Example:
        kanbo add "Write documentation"
        kanbo add "Fix bug" --column "In Progress" --priority high --due tomorrow
    """
    try:
        store = get_store()
        state = store.get_state()

        if not state.board.column_order:
            error_console.print("[red]Error:[/red] The board has no columns. Create one with: kanbo column add <name>")
            raise typer.Exit(1)

        if column_ref:
            column = service.find_column_or_raise(state, column_ref)
        else:
            column = state.ordered_columns()[0]

        result = check_result(store.add_task(
            column.id,
            title,
            description=description,
            priority=service.parse_priority(priority),
            due_date=service.parse_due_date(due) if due else None,
        ))

        task = result.state.tasks[result.created_id]
        if json_output:
            typer.echo(BoardFormatter.task_to_json(task))
        else:
            number = service.task_number(result.state, task.id)
            console.print(
                f"[green]✓ Created task [bold]#{number}[/bold]:[/green] {escape(task.title)} "
                f"[dim]({escape(column.name)})[/dim]"
            )

    except (InvalidInputError, ColumnNotFoundError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KanboError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def edit(
    task_ref: str = typer.Argument(..., help="Task number or id"),
    title: Optional[str] = typer.Argument(None, help="New title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="New description ('' clears it)"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="none, low, medium or high"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date, or 'none' to clear"),
):
    """
    Update a task's title, description, priority or due date.

    Example:
        kanbo edit 3 "Updated title"
        kanbo edit 3 --priority high --due 2025-01-31
        kanbo edit 3 --due none
    """
    try:
        store = get_store()
        task = service.find_task_or_raise(store.get_state(), task_ref)

        fields = {}
        if title is not None:
            fields["title"] = title
        if description is not None:
            fields["description"] = description
        if priority is not None:
            fields["priority"] = service.parse_priority(priority)
        if due is not None:
            fields["due_date"] = service.parse_due_date(due)

        if not fields:
            error_console.print("[red]Error:[/red] Nothing to change. Give a title or --desc/--priority/--due")
            raise typer.Exit(1)

        result = check_result(store.update_task(task.id, **fields))
        updated = result.state.tasks[task.id]
        if result.changed:
            console.print(f"[green]✓ Updated task:[/green] {escape(updated.title)}")
        else:
            console.print(f"[dim]No changes to task: {escape(updated.title)}[/dim]")

    except (InvalidInputError, TaskNotFoundError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KanboError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


def _set_completed(task_refs: str, completed: bool) -> None:
    """Shared body of done/undone: resolve each ref, update, report errors."""
    store = get_store()
    updated = []
    errors = []

    # Resolve every ref against the same snapshot so board numbers stay stable
    state = store.get_state()
    for ref in _split_refs(task_refs):
        try:
            task = service.find_task_or_raise(state, ref)
        except KanboError as e:
            errors.append(str(e))
            continue
        result = store.update_task(task.id, is_completed=completed)
        if result.ok:
            updated.append(result.state.tasks[task.id])
        else:
            errors.append(result.error)

    verb = "Completed" if completed else "Reopened"
    for task in updated:
        console.print(f"[green]✓[/green] {verb}: {escape(task.title)}")

    if errors:
        for error in errors:
            error_console.print(f"[red]Error:[/red] {error}")
        if not updated:
            raise typer.Exit(1)


@app.command()
def done(
    task_refs: str = typer.Argument(..., help="Task number(s) or id(s), comma-separated"),
):
    """
    Mark one or more tasks as complete.

    Example:
        kanbo done 5
        kanbo done 3,5,7
    """
    _set_completed(task_refs, True)


@app.command()
def undone(
    task_refs: str = typer.Argument(..., help="Task number(s) or id(s), comma-separated"),
):
    """
    Mark one or more tasks as not complete.

    Example:
        kanbo undone 5
    """
    _set_completed(task_refs, False)


@app.command()
def rm(
    task_refs: str = typer.Argument(..., help="Task number(s) or id(s), comma-separated"),
):
    """
    Delete one or more tasks.

    Example:
        kanbo rm 5
        kanbo rm 3,5,7
    """
    store = get_store()
    state = store.get_state()
    deleted = []
    errors = []

    # Resolve all refs first: deleting shifts the board numbers of later tasks
    targets = []
    for ref in _split_refs(task_refs):
        try:
            targets.append(service.find_task_or_raise(state, ref))
        except KanboError as e:
            errors.append(str(e))

    for task in targets:
        if store.delete_task(task.id).changed:
            deleted.append(task)

    for task in deleted:
        console.print(f"[green]✓[/green] Deleted: {escape(task.title)}")

    if errors:
        for error in errors:
            error_console.print(f"[red]Error:[/red] {error}")
        if not deleted:
            raise typer.Exit(1)


@app.command()
def view(
    task_ref: str = typer.Argument(..., help="Task number or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    View full task details.

    Example:
        kanbo view 3
        kanbo view 3 --json
    """
    try:
        state = get_store().get_state()
        task = service.find_task_or_raise(state, task_ref)
    except (InvalidInputError, TaskNotFoundError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(BoardFormatter.task_to_json(task))
        return

    console.print(BoardFormatter.create_task_panel(
        task,
        service.column_of(state, task.id),
        service.task_number(state, task.id),
    ))


@app.command()
def mv(
    task_ref: str = typer.Argument(..., help="Task number or id"),
    position: int = typer.Argument(..., help="New 1-based position within its column"),
):
    """
    Move a task up or down within its column.

    Tasks never change columns here: to relocate one, delete it and add it
    to the other column.

    Example:
        kanbo mv 4 1       # Move task #4 to the top of its column
    """
    try:
        store = get_store()
        task = service.find_task_or_raise(store.get_state(), task_ref)
    except (InvalidInputError, TaskNotFoundError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = check_result(store.move_task(task.id, position - 1))
    column = service.column_of(result.state, task.id)
    index = column.task_ids.index(task.id) + 1 if column else position
    console.print(f"[green]✓ Moved[/green] {escape(task.title)} [dim]to position {index}[/dim]")
