"""
FILE: kanbo/core/models.py
PURPOSE: Domain models for the board, its columns, tasks and whole-store snapshots
EXPORTS:
  - Priority (enum)
  - Task (frozen dataclass)
  - TaskDraft (frozen dataclass)
  - Column (frozen dataclass)
  - Board (frozen dataclass)
  - BoardState (frozen dataclass, the snapshot)
DEPENDENCIES:
  - dataclasses, datetime, enum, types, typing (stdlib)
NOTES:
  - All models are immutable; mutations build new values with dataclasses.replace()
  - Orderings are tuples, maps are read-only MappingProxyType views
  - All models have from_dict()/to_dict() using the camelCase persisted layout
  - Dates are ISO-8601 strings in dict form, date/datetime values in memory
  - from_dict() raises KeyError/TypeError/ValueError on malformed input;
    persistence turns those into CorruptStateError
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class Priority(str, Enum):
    """Task priority. Values match the persisted strings."""

    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _require_str(raw: Mapping[str, Any], key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string or null, got {type(value).__name__}")
    return value


def _id_tuple(raw: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    values = raw[key]
    if not isinstance(values, (list, tuple)):
        raise TypeError(f"'{key}' must be a list")
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"'{key}' must only contain string ids")
    return tuple(values)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an ISO-8601 date.

    Accepts 'YYYY-MM-DD' or a full timestamp (e.g. '2023-12-15T00:00:00.000Z'),
    which is truncated to its date.
    """
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return parse_iso_datetime(value).date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC."""
    if value is None:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Task:
    """A unit of work with descriptive metadata."""

    id: str
    title: str
    description: Optional[str] = None
    is_completed: bool = False
    priority: Priority = Priority.NONE
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Task":
        """Build a Task from its persisted dict form."""
        is_completed = raw.get("isCompleted", False)
        if not isinstance(is_completed, bool):
            raise TypeError("'isCompleted' must be a boolean")

        return cls(
            id=_require_str(raw, "id"),
            title=_require_str(raw, "title"),
            description=_optional_str(raw, "description"),
            is_completed=is_completed,
            priority=Priority(raw.get("priority", Priority.NONE.value)),
            due_date=parse_iso_date(_optional_str(raw, "dueDate")),
            created_at=parse_iso_datetime(_optional_str(raw, "createdAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted dict form."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "isCompleted": self.is_completed,
            "priority": self.priority.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class TaskDraft:
    """
    Caller-supplied fields for a new task.

    is_completed and created_at are not part of a draft: the store owns them.
    """

    title: str
    description: Optional[str] = None
    priority: Priority = Priority.NONE
    due_date: Optional[date] = None


@dataclass(frozen=True)
class Column:
    """A named, ordered bucket of tasks."""

    id: str
    name: str
    task_ids: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Column":
        return cls(
            id=_require_str(raw, "id"),
            name=_require_str(raw, "name"),
            task_ids=_id_tuple(raw, "taskIds"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "taskIds": list(self.task_ids)}


@dataclass(frozen=True)
class Board:
    """The single top-level container ordering columns."""

    id: str
    name: str
    column_order: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Board":
        return cls(
            id=_require_str(raw, "id"),
            name=_require_str(raw, "name"),
            column_order=_id_tuple(raw, "columnOrder"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "columnOrder": list(self.column_order)}


@dataclass(frozen=True)
class BoardState:
    """
    Immutable snapshot of the whole store.

    columns and tasks are copied into read-only views on construction, so a
    snapshot can never be changed through a dict the caller still holds.
    """

    board: Board
    columns: Mapping[str, Column] = field(default_factory=dict)
    tasks: Mapping[str, Task] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))
        object.__setattr__(self, "tasks", MappingProxyType(dict(self.tasks)))

    def ordered_columns(self) -> Tuple[Column, ...]:
        """Columns in display order (ids missing from the map are skipped)."""
        return tuple(self.columns[cid] for cid in self.board.column_order if cid in self.columns)

    def column_tasks(self, column_id: str) -> Tuple[Task, ...]:
        """Tasks of one column in display order; empty for an unknown column."""
        column = self.columns.get(column_id)
        if column is None:
            return ()
        return tuple(self.tasks[tid] for tid in column.task_ids if tid in self.tasks)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "BoardState":
        """Build a snapshot from the persisted 'state' object."""
        columns_raw = raw["columns"]
        tasks_raw = raw["tasks"]
        if not isinstance(columns_raw, Mapping) or not isinstance(tasks_raw, Mapping):
            raise TypeError("'columns' and 'tasks' must be objects")

        columns = {}
        for key, value in columns_raw.items():
            column = Column.from_dict(value)
            if column.id != key:
                raise ValueError(f"Column key '{key}' does not match id '{column.id}'")
            columns[key] = column

        tasks = {}
        for key, value in tasks_raw.items():
            task = Task.from_dict(value)
            if task.id != key:
                raise ValueError(f"Task key '{key}' does not match id '{task.id}'")
            tasks[key] = task

        return cls(board=Board.from_dict(raw["board"]), columns=columns, tasks=tasks)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted 'state' object."""
        return {
            "board": self.board.to_dict(),
            "columns": {cid: column.to_dict() for cid, column in self.columns.items()},
            "tasks": {tid: task.to_dict() for tid, task in self.tasks.items()},
        }
