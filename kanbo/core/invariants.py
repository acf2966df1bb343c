"""
FILE: kanbo/core/invariants.py
PURPOSE: Referential-integrity checks and repair for board snapshots
EXPORTS:
  - find_violations(state) -> List[str]
  - repair(state) -> Tuple[BoardState, List[str]]
DEPENDENCIES:
  - kanbo.core.models (BoardState)
NOTES:
  - find_violations() is used by tests after every operation
  - repair() runs on load; operations never need it
  - Repair rules: drop dangling ids, keep the first column listing a task,
    append columns missing from the order, drop tasks no column lists,
    give blank names a placeholder
"""

from dataclasses import replace
from typing import Dict, List, Set, Tuple

from .constants import DEFAULT_BOARD_NAME
from .models import BoardState, Column


UNTITLED = "Untitled"


def find_violations(state: BoardState) -> List[str]:
    """
    List every broken invariant in a snapshot.

    Returns:
        Human-readable descriptions; empty when the snapshot is consistent
    """
    problems = []
    order = state.board.column_order

    if len(set(order)) != len(order):
        problems.append("column order contains duplicates")
    for column_id in order:
        if column_id not in state.columns:
            problems.append(f"column order references missing column {column_id}")
    for column_id in state.columns:
        if column_id not in order:
            problems.append(f"column {column_id} is missing from the column order")

    owners: Dict[str, str] = {}
    for column_id, column in state.columns.items():
        for task_id in column.task_ids:
            if task_id not in state.tasks:
                problems.append(f"column {column_id} references missing task {task_id}")
            if task_id in owners:
                problems.append(
                    f"task {task_id} is listed by {owners[task_id]} and {column_id}"
                )
            else:
                owners[task_id] = column_id

    if not state.board.name.strip():
        problems.append("board name is empty")
    for column in state.columns.values():
        if not column.name.strip():
            problems.append(f"column {column.id} has an empty name")
    for task in state.tasks.values():
        if not task.title.strip():
            problems.append(f"task {task.id} has an empty title")

    return problems


def repair(state: BoardState) -> Tuple[BoardState, List[str]]:
    """
    Rebuild a snapshot so that find_violations() reports nothing.

    Returns:
        (repaired state, list of repairs made); the input state is returned
        unchanged when nothing needed fixing
    """
    repairs = []

    order: List[str] = []
    for column_id in state.board.column_order:
        if column_id not in state.columns:
            repairs.append(f"dropped missing column {column_id} from column order")
        elif column_id in order:
            repairs.append(f"dropped duplicate column {column_id} from column order")
        else:
            order.append(column_id)
    for column_id in state.columns:
        if column_id not in order:
            repairs.append(f"appended unordered column {column_id}")
            order.append(column_id)

    seen: Set[str] = set()
    columns: Dict[str, Column] = {}
    for column_id in order:
        column = state.columns[column_id]
        kept = []
        for task_id in column.task_ids:
            if task_id not in state.tasks:
                repairs.append(f"dropped missing task {task_id} from column {column_id}")
            elif task_id in seen:
                repairs.append(f"dropped duplicate reference to task {task_id} from column {column_id}")
            else:
                seen.add(task_id)
                kept.append(task_id)
        if not column.name.strip():
            repairs.append(f"named blank column {column_id}")
            column = replace(column, name=UNTITLED)
        columns[column_id] = replace(column, task_ids=tuple(kept))

    tasks = {}
    for task_id, task in state.tasks.items():
        if task_id in seen:
            if not task.title.strip():
                repairs.append(f"titled blank task {task_id}")
                task = replace(task, title=UNTITLED)
            tasks[task_id] = task
        else:
            repairs.append(f"dropped orphan task {task_id}")

    if not state.board.name.strip():
        repairs.append("named blank board")

    if not repairs:
        return state, repairs

    board = replace(state.board, column_order=tuple(order))
    if not board.name.strip():
        board = replace(board, name=DEFAULT_BOARD_NAME)
    return BoardState(board, columns, tasks), repairs
