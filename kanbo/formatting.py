"""
FILE: kanbo/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - BoardFormatter: Class for rendering the board, columns and tasks
  - PRIORITY_STYLES: Rich style per priority
DEPENDENCIES:
  - rich (tables, panels, text)
  - json (for JSON export)
  - kanbo.core.models (BoardState, Column, Task, Priority)
  - kanbo.core.service (numbered_tasks)
NOTES:
  - Centralized formatting logic for consistency
  - Used by both CLI and REPL
  - Task numbers shown here are the ones find_task_or_raise() accepts
"""

import json
from datetime import date
from typing import Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .core.models import BoardState, Column, Priority, Task
from .core.service import board_counts, numbered_tasks


PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "blue",
    Priority.NONE: "dim",
}


class BoardFormatter:
    """Centralized board display formatting."""

    @staticmethod
    def task_text(number: int, task: Task, today: Optional[date] = None) -> Text:
        """
        One-line task summary: number, check mark, title, priority, due date.

        Overdue open tasks get their due date in red.
        """
        today = today or date.today()
        text = Text()
        text.append(f"#{number} ", style="cyan")
        if task.is_completed:
            text.append("✓ ", style="green")
            text.append(task.title, style="dim strike")
        else:
            text.append("○ ", style="yellow")
            text.append(task.title)

        if task.priority is not Priority.NONE:
            text.append(f" [{task.priority.value}]", style=PRIORITY_STYLES[task.priority])

        if task.due_date:
            overdue = task.due_date < today and not task.is_completed
            text.append(f" due {task.due_date.isoformat()}", style="bold red" if overdue else "magenta")

        return text

    @staticmethod
    def create_board_table(state: BoardState, today: Optional[date] = None) -> Table:
        """
        Create Rich table for the whole board, one table column per board column.

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=escape(state.board.name), show_header=True, header_style="bold cyan", expand=True)
        columns = state.ordered_columns()
        cells = {column.id: [] for column in columns}

        for number, task, column in numbered_tasks(state):
            cells[column.id].append(BoardFormatter.task_text(number, task, today))

        for column in columns:
            table.add_column(f"{escape(column.name)} ({len(cells[column.id])})", vertical="top")

        if not columns:
            return table

        height = max((len(tasks) for tasks in cells.values()), default=0)
        for row in range(height):
            table.add_row(*[
                cells[column.id][row] if row < len(cells[column.id]) else Text("")
                for column in columns
            ])

        return table

    @staticmethod
    def create_columns_table(state: BoardState) -> Table:
        """Create Rich table listing columns with position, id and task count."""
        table = Table(title="Columns", show_header=True, header_style="bold cyan")
        table.add_column("#", style="cyan", width=4, no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Tasks", style="magenta", justify="right")
        table.add_column("ID", style="dim")

        for position, column in enumerate(state.ordered_columns(), start=1):
            table.add_row(str(position), escape(column.name), str(len(column.task_ids)), column.id)

        return table

    @staticmethod
    def create_task_panel(task: Task, column: Optional[Column], number: Optional[int]) -> Panel:
        """Create Rich panel with every field of one task."""
        lines = [
            f"[bold]ID:[/bold] {task.id}",
            f"[bold]Column:[/bold] {escape(column.name) if column else '-'}",
            f"[bold]Status:[/bold] {'done' if task.is_completed else 'open'}",
            f"[bold]Priority:[/bold] [{PRIORITY_STYLES[task.priority]}]{task.priority.value}[/]",
            f"[bold]Due:[/bold] {task.due_date.isoformat() if task.due_date else '-'}",
            f"[bold]Created:[/bold] {task.created_at.isoformat() if task.created_at else '-'}",
        ]
        if task.description:
            lines.append("")
            lines.append(escape(task.description))

        title = f"#{number} {escape(task.title)}" if number else escape(task.title)
        return Panel("\n".join(lines), title=title, border_style="cyan", title_align="left")

    @staticmethod
    def summary_line(state: BoardState) -> str:
        """Short 'N column(s), M task(s), K done' status line."""
        counts = board_counts(state)
        return (
            f"{counts['columns']} column(s), {counts['tasks']} task(s), "
            f"{counts['completed']} done"
        )

    @staticmethod
    def board_to_json(state: BoardState) -> str:
        """Board snapshot as pretty JSON (same layout as the stored record)."""
        return json.dumps(state.to_dict(), indent=2)

    @staticmethod
    def task_to_json(task: Task) -> str:
        return json.dumps(task.to_dict(), indent=2)
