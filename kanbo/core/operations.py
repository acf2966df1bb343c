"""
FILE: kanbo/core/operations.py
PURPOSE: Pure board mutations: (snapshot, arguments) -> Outcome
EXPORTS:
  - Outcome (dataclass: state, changed, created_id)
  - utc_now() -> datetime
  - add_task(state, column_id, draft, ids, clock) -> Outcome
  - update_task(state, task_id, **fields) -> Outcome
  - delete_task(state, task_id) -> Outcome
  - add_column(state, name, ids) -> Outcome
  - update_column_name(state, column_id, name) -> Outcome
  - delete_column(state, column_id) -> Outcome
  - update_board_name(state, name) -> Outcome
  - reorder_columns(state, column_order) -> Outcome
  - reorder_tasks(state, column_id, task_ids) -> Outcome
  - move_column(state, column_id, index) -> Outcome
  - move_task(state, task_id, index) -> Outcome
  - AddTask, UpdateTask, DeleteTask, AddColumn, UpdateColumnName, DeleteColumn,
    UpdateBoardName, ReorderColumns, ReorderTasks, MoveColumn, MoveTask (operation values)
  - apply(state, operation, ids, clock) -> Outcome
DEPENDENCIES:
  - kanbo.core.models, kanbo.core.ids, kanbo.core.constants, kanbo.core.exceptions
  - logging (stdlib)
NOTES:
  - Never mutates the input snapshot; every change builds a new BoardState
  - Stale references (unknown ids) return the input state with changed=False
  - Stale references are checked before argument validation
  - Invalid arguments (empty names, bad priority) raise InvalidInputError
  - A non-BoardState snapshot raises TypeError (programmer error)
  - Names and titles are stored trimmed
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .constants import ENTITY_COLUMN, ENTITY_TASK, UPDATABLE_TASK_FIELDS
from .exceptions import InvalidInputError
from .ids import IdGenerator, new_unique_id, uuid_ids
from .models import BoardState, Column, Priority, Task, TaskDraft


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time at second precision (what the persisted record keeps)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class Outcome:
    """
    Result of a pure operation.

    Attributes:
        state: Next snapshot (the input snapshot itself when nothing changed)
        changed: Whether state differs from the input
        created_id: Id of the entity created by add_task/add_column
    """
    state: BoardState
    changed: bool = False
    created_id: Optional[str] = None


# --- Validation helpers ---


def _require_state(state: BoardState) -> None:
    if not isinstance(state, BoardState):
        raise TypeError(f"Expected a BoardState snapshot, got {type(state).__name__}")


def _clean_name(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(f"{label} must be text")
    cleaned = value.strip()
    if not cleaned:
        raise InvalidInputError(f"{label} cannot be empty")
    return cleaned


def _clean_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError("Task description must be text")
    return value.strip() or None


def _coerce_priority(value: Any) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        valid = ", ".join(p.value for p in Priority)
        raise InvalidInputError(f"Invalid priority '{value}'. Must be one of: {valid}")


def _coerce_due_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInputError(f"Due date must be a date, got {type(value).__name__}")


def _coerce_completed(value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidInputError("is_completed must be True or False")
    return value


_FIELD_CLEANERS: Dict[str, Callable[[Any], Any]] = {
    "title": lambda value: _clean_name(value, "Task title"),
    "description": _clean_description,
    "priority": _coerce_priority,
    "is_completed": _coerce_completed,
    "due_date": _coerce_due_date,
}


def _without(ids: Iterable[str], removed) -> Tuple[str, ...]:
    return tuple(i for i in ids if i not in removed)


def _is_permutation(candidate: Sequence[str], current: Sequence[str]) -> bool:
    return (
        len(candidate) == len(current)
        and len(set(candidate)) == len(candidate)
        and set(candidate) == set(current)
    )


def _moved(ids: Sequence[str], item: str, index: int) -> List[str]:
    order = [i for i in ids if i != item]
    index = max(0, min(index, len(order)))
    order.insert(index, item)
    return order


# --- Task operations ---


def add_task(
    state: BoardState,
    column_id: str,
    draft: TaskDraft,
    ids: IdGenerator = uuid_ids,
    clock: Clock = utc_now,
) -> Outcome:
    """
    Append a new task to a column.

    created_at is stamped from clock() and is_completed starts False; the
    draft cannot set either.

    Returns:
        Outcome with created_id set, or unchanged if the column is unknown

    Raises:
        InvalidInputError: If the title is empty or a field is malformed
    """
    _require_state(state)
    column = state.columns.get(column_id)
    if column is None:
        logger.debug("add_task: unknown column %s, ignored", column_id)
        return Outcome(state)

    title = _clean_name(draft.title, "Task title")
    task_id = new_unique_id(ids, ENTITY_TASK, state.tasks)
    task = Task(
        id=task_id,
        title=title,
        description=_clean_description(draft.description),
        is_completed=False,
        priority=_coerce_priority(draft.priority),
        due_date=_coerce_due_date(draft.due_date),
        created_at=clock(),
    )

    tasks = dict(state.tasks)
    tasks[task_id] = task
    columns = dict(state.columns)
    columns[column_id] = replace(column, task_ids=column.task_ids + (task_id,))
    return Outcome(BoardState(state.board, columns, tasks), True, task_id)


def update_task(state: BoardState, task_id: str, **fields: Any) -> Outcome:
    """
    Merge the given fields into an existing task.

    Only title, description, priority, is_completed and due_date may change.
    The task keeps its id, created_at and column.

    Raises:
        InvalidInputError: For a non-updatable field name or an invalid value
    """
    _require_state(state)
    unknown = sorted(set(fields) - set(UPDATABLE_TASK_FIELDS))
    if unknown:
        raise InvalidInputError(f"Cannot update task field(s): {', '.join(unknown)}")

    task = state.tasks.get(task_id)
    if task is None:
        logger.debug("update_task: unknown task %s, ignored", task_id)
        return Outcome(state)

    changes = {name: _FIELD_CLEANERS[name](value) for name, value in fields.items()}
    updated = replace(task, **changes)
    if updated == task:
        return Outcome(state)

    tasks = dict(state.tasks)
    tasks[task_id] = updated
    return Outcome(BoardState(state.board, state.columns, tasks), True)


def delete_task(state: BoardState, task_id: str) -> Outcome:
    """
    Remove a task and strip its id from every column listing it.

    A task referenced by no column is left alone, even if it is in the map.
    """
    _require_state(state)
    holders = [column for column in state.columns.values() if task_id in column.task_ids]
    if not holders:
        logger.debug("delete_task: task %s not in any column, ignored", task_id)
        return Outcome(state)

    columns = dict(state.columns)
    for column in holders:
        columns[column.id] = replace(column, task_ids=_without(column.task_ids, {task_id}))
    tasks = dict(state.tasks)
    tasks.pop(task_id, None)
    return Outcome(BoardState(state.board, columns, tasks), True)


# --- Column operations ---


def add_column(state: BoardState, name: str, ids: IdGenerator = uuid_ids) -> Outcome:
    """
    Append a new empty column to the board.

    Raises:
        InvalidInputError: If name is empty after trimming
    """
    _require_state(state)
    name = _clean_name(name, "Column name")
    taken = set(state.columns) | set(state.board.column_order)
    column_id = new_unique_id(ids, ENTITY_COLUMN, taken)

    columns = dict(state.columns)
    columns[column_id] = Column(id=column_id, name=name)
    board = replace(state.board, column_order=state.board.column_order + (column_id,))
    return Outcome(BoardState(board, columns, state.tasks), True, column_id)


def update_column_name(state: BoardState, column_id: str, name: str) -> Outcome:
    """Rename a column in place. Unknown column: no-op. Empty name: InvalidInputError."""
    _require_state(state)
    column = state.columns.get(column_id)
    if column is None:
        logger.debug("update_column_name: unknown column %s, ignored", column_id)
        return Outcome(state)

    name = _clean_name(name, "Column name")
    if name == column.name:
        return Outcome(state)

    columns = dict(state.columns)
    columns[column_id] = replace(column, name=name)
    return Outcome(BoardState(state.board, columns, state.tasks), True)


def delete_column(state: BoardState, column_id: str) -> Outcome:
    """
    Delete a column and every task it lists.

    The cascaded task ids are also stripped from any other column, so a
    duplicated reference cannot survive as a dangling id.
    """
    _require_state(state)
    column = state.columns.get(column_id)
    if column is None and column_id not in state.board.column_order:
        logger.debug("delete_column: unknown column %s, ignored", column_id)
        return Outcome(state)

    doomed = set(column.task_ids) if column else set()
    columns = {
        cid: replace(other, task_ids=_without(other.task_ids, doomed))
        if doomed.intersection(other.task_ids) else other
        for cid, other in state.columns.items()
        if cid != column_id
    }
    tasks = {tid: task for tid, task in state.tasks.items() if tid not in doomed}
    board = replace(state.board, column_order=_without(state.board.column_order, {column_id}))

    if doomed:
        logger.debug("delete_column: %s cascaded to %d task(s)", column_id, len(doomed))
    return Outcome(BoardState(board, columns, tasks), True)


# --- Board operations ---


def update_board_name(state: BoardState, name: str) -> Outcome:
    """Rename the board. Empty name: InvalidInputError."""
    _require_state(state)
    name = _clean_name(name, "Board name")
    if name == state.board.name:
        return Outcome(state)
    return Outcome(BoardState(replace(state.board, name=name), state.columns, state.tasks), True)


# --- Reordering ---


def reorder_columns(state: BoardState, column_order: Sequence[str]) -> Outcome:
    """
    Replace the board's column order.

    column_order must be a permutation of the current order; anything else
    comes from a stale view and is ignored.
    """
    _require_state(state)
    new_order = tuple(column_order)
    current = state.board.column_order
    if not _is_permutation(new_order, current):
        logger.debug("reorder_columns: %r is not a permutation of %r, ignored", new_order, current)
        return Outcome(state)
    if new_order == current:
        return Outcome(state)

    board = replace(state.board, column_order=new_order)
    return Outcome(BoardState(board, state.columns, state.tasks), True)


def reorder_tasks(state: BoardState, column_id: str, task_ids: Sequence[str]) -> Outcome:
    """Replace one column's task order; same permutation rule as reorder_columns()."""
    _require_state(state)
    column = state.columns.get(column_id)
    if column is None:
        logger.debug("reorder_tasks: unknown column %s, ignored", column_id)
        return Outcome(state)

    new_order = tuple(task_ids)
    if not _is_permutation(new_order, column.task_ids):
        logger.debug("reorder_tasks: stale order for column %s, ignored", column_id)
        return Outcome(state)
    if new_order == column.task_ids:
        return Outcome(state)

    columns = dict(state.columns)
    columns[column_id] = replace(column, task_ids=new_order)
    return Outcome(BoardState(state.board, columns, state.tasks), True)


def move_column(state: BoardState, column_id: str, index: int) -> Outcome:
    """Move a column to a position (clamped to the valid range)."""
    _require_state(state)
    if column_id not in state.board.column_order:
        return Outcome(state)
    return reorder_columns(state, _moved(state.board.column_order, column_id, index))


def move_task(state: BoardState, task_id: str, index: int) -> Outcome:
    """Move a task to a position within its own column (clamped)."""
    _require_state(state)
    for column_id in state.board.column_order:
        column = state.columns.get(column_id)
        if column is not None and task_id in column.task_ids:
            return reorder_tasks(state, column_id, _moved(column.task_ids, task_id, index))
    return Outcome(state)


# --- Operation values and dispatch ---


@dataclass(frozen=True)
class AddTask:
    column_id: str
    draft: TaskDraft


@dataclass(frozen=True)
class UpdateTask:
    task_id: str
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class AddColumn:
    name: str


@dataclass(frozen=True)
class UpdateColumnName:
    column_id: str
    name: str


@dataclass(frozen=True)
class DeleteColumn:
    column_id: str


@dataclass(frozen=True)
class UpdateBoardName:
    name: str


@dataclass(frozen=True)
class ReorderColumns:
    column_order: Tuple[str, ...]


@dataclass(frozen=True)
class ReorderTasks:
    column_id: str
    task_ids: Tuple[str, ...]


@dataclass(frozen=True)
class MoveColumn:
    column_id: str
    index: int


@dataclass(frozen=True)
class MoveTask:
    task_id: str
    index: int


_HANDLERS: Dict[type, Callable[[BoardState, Any, IdGenerator, Clock], Outcome]] = {
    AddTask: lambda s, op, ids, clock: add_task(s, op.column_id, op.draft, ids, clock),
    UpdateTask: lambda s, op, ids, clock: update_task(s, op.task_id, **op.fields),
    DeleteTask: lambda s, op, ids, clock: delete_task(s, op.task_id),
    AddColumn: lambda s, op, ids, clock: add_column(s, op.name, ids),
    UpdateColumnName: lambda s, op, ids, clock: update_column_name(s, op.column_id, op.name),
    DeleteColumn: lambda s, op, ids, clock: delete_column(s, op.column_id),
    UpdateBoardName: lambda s, op, ids, clock: update_board_name(s, op.name),
    ReorderColumns: lambda s, op, ids, clock: reorder_columns(s, op.column_order),
    ReorderTasks: lambda s, op, ids, clock: reorder_tasks(s, op.column_id, op.task_ids),
    MoveColumn: lambda s, op, ids, clock: move_column(s, op.column_id, op.index),
    MoveTask: lambda s, op, ids, clock: move_task(s, op.task_id, op.index),
}


def apply(
    state: BoardState,
    operation: Any,
    ids: IdGenerator = uuid_ids,
    clock: Clock = utc_now,
) -> Outcome:
    """
    Run one operation value against a snapshot.

    Raises:
        TypeError: For an unknown operation type or a non-BoardState snapshot
        InvalidInputError: When the operation's arguments fail validation
    """
    handler = _HANDLERS.get(type(operation))
    if handler is None:
        raise TypeError(f"Unknown operation: {operation!r}")
    return handler(state, operation, ids, clock)
