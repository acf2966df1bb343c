"""
FILE: kanbo/core/service.py
PURPOSE: Store wiring and lookup/parsing helpers shared by the CLI and REPL
EXPORTS:
  - open_store(storage, ids, clock) -> BoardStore
  - numbered_tasks(state) -> List[Tuple[int, Task, Column]]
  - find_column_or_raise(state, ref) -> Column
  - find_task_or_raise(state, ref) -> Task
  - column_of(state, task_id) -> Optional[Column]
  - board_counts(state) -> Dict[str, int]
  - task_number(state, task_id) -> Optional[int]
  - parse_priority(text) -> Priority
  - parse_due_date(text, today) -> Optional[date]
DEPENDENCIES:
  - kanbo.core.store (BoardStore)
  - kanbo.core.persistence (BoardPersistence)
  - kanbo.core.repository (SqliteStorage)
  - kanbo.core.models (BoardState, Column, Task, Priority)
  - kanbo.core.exceptions (ColumnNotFoundError, TaskNotFoundError, InvalidInputError)
NOTES:
  - Lookups raise NotFound errors; the store itself never does
  - References accept an exact id, a display number/name, or a unique id prefix
  - Task numbers are 1-based positions across the board in display order
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from .exceptions import ColumnNotFoundError, InvalidInputError, TaskNotFoundError
from .ids import IdGenerator, uuid_ids
from .models import BoardState, Column, Priority, Task
from .operations import Clock, utc_now
from .persistence import BoardPersistence
from .repository import SqliteStorage, StorageBackend
from .store import BoardStore


def open_store(
    storage: Optional[StorageBackend] = None,
    ids: IdGenerator = uuid_ids,
    clock: Clock = utc_now,
) -> BoardStore:
    """
    Load the persisted board and return a store that saves every change.

    Args:
        storage: Backend to use (defaults to SqliteStorage at DB_PATH)
    """
    if storage is None:
        storage = SqliteStorage()
    return BoardStore.open(BoardPersistence(storage), ids=ids, clock=clock)


def numbered_tasks(state: BoardState) -> List[Tuple[int, Task, Column]]:
    """Every task with its 1-based board position and owning column."""
    numbered = []
    for column in state.ordered_columns():
        for task in state.column_tasks(column.id):
            numbered.append((len(numbered) + 1, task, column))
    return numbered


def _unique_prefix(candidates, ref: str, label: str):
    matches = [c for c in candidates if c.id.startswith(ref)]
    if len(matches) > 1:
        raise InvalidInputError(f"{label} id prefix '{ref}' is ambiguous ({len(matches)} matches)")
    return matches[0] if matches else None


def find_column_or_raise(state: BoardState, ref: str) -> Column:
    """
    Resolve a column reference.

    Tried in order: exact id, case-insensitive name, 1-based position,
    unique id prefix.

    Raises:
        InvalidInputError: If ref is empty or matches several columns
        ColumnNotFoundError: If nothing matches
    """
    ref = ref.strip()
    if not ref:
        raise InvalidInputError("Column reference cannot be empty")

    if ref in state.columns:
        return state.columns[ref]

    ordered = state.ordered_columns()
    named = [c for c in ordered if c.name.lower() == ref.lower()]
    if len(named) > 1:
        raise InvalidInputError(f"Several columns are named '{ref}'; use the column id")
    if named:
        return named[0]

    if ref.isdigit() and 1 <= int(ref) <= len(ordered):
        return ordered[int(ref) - 1]

    column = _unique_prefix(ordered, ref, "Column")
    if column is None:
        raise ColumnNotFoundError(ref)
    return column


def find_task_or_raise(state: BoardState, ref: str) -> Task:
    """
    Resolve a task reference: exact id, board number, or unique id prefix.

    Raises:
        InvalidInputError: If ref is empty or an ambiguous prefix
        TaskNotFoundError: If nothing matches
    """
    ref = ref.strip().lstrip("#")
    if not ref:
        raise InvalidInputError("Task reference cannot be empty")

    if ref in state.tasks:
        return state.tasks[ref]

    numbered = numbered_tasks(state)
    if ref.isdigit() and 1 <= int(ref) <= len(numbered):
        return numbered[int(ref) - 1][1]

    task = _unique_prefix([t for _, t, _ in numbered], ref, "Task")
    if task is None:
        raise TaskNotFoundError(ref)
    return task


def column_of(state: BoardState, task_id: str) -> Optional[Column]:
    """The column listing task_id, or None."""
    for column in state.ordered_columns():
        if task_id in column.task_ids:
            return column
    return None


def board_counts(state: BoardState) -> Dict[str, int]:
    """Column, task and completed-task totals for status lines."""
    return {
        "columns": len(state.columns),
        "tasks": len(state.tasks),
        "completed": sum(1 for task in state.tasks.values() if task.is_completed),
    }


def parse_priority(text: str) -> Priority:
    """
    Parse a user-typed priority (case-insensitive; 'none' or '-' for no priority).

    Raises:
        InvalidInputError: If text is not a known priority
    """
    cleaned = text.strip().lower()
    if cleaned in ("", "-"):
        return Priority.NONE
    for priority in Priority:
        if priority.value.lower() == cleaned:
            return priority
    valid = ", ".join(p.value.lower() for p in Priority)
    raise InvalidInputError(f"Invalid priority '{text}'. Must be one of: {valid}")


def parse_due_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Parse a user-typed due date.

    Accepts YYYY-MM-DD, 'today', 'tomorrow', '+N' (days from today), and
    'none'/'clear'/'' for no due date.

    Raises:
        InvalidInputError: If text is not a recognizable date
    """
    today = today or date.today()
    cleaned = text.strip().lower()

    if cleaned in ("", "none", "clear"):
        return None
    if cleaned == "today":
        return today
    if cleaned == "tomorrow":
        return today + timedelta(days=1)
    if cleaned.startswith("+") and cleaned[1:].isdigit():
        return today + timedelta(days=int(cleaned[1:]))

    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        raise InvalidInputError(f"Invalid due date '{text}'. Use YYYY-MM-DD, today, tomorrow or +N")


def task_number(state: BoardState, task_id: str) -> Optional[int]:
    """1-based board position of a task, or None if no column lists it."""
    for number, task, _ in numbered_tasks(state):
        if task.id == task_id:
            return number
    return None
