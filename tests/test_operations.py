"""
Tests for the pure board operations.

Covers:
- Add/update/delete for tasks and columns, board rename
- Trimming and validation of names
- Stale references as no-ops
- Cascading column deletion
- Reordering and moves
- Random operation sequences keep the board consistent
"""

import random
from datetime import date, datetime, timezone

import pytest

from kanbo.core import operations
from kanbo.core.exceptions import InvalidInputError
from kanbo.core.ids import SequentialIds
from kanbo.core.invariants import find_violations
from kanbo.core.models import Board, BoardState, Column, Priority, Task, TaskDraft
from kanbo.core.persistence import default_state


NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def clock():
    return NOW


def two_column_board(ids):
    """To Do with two tasks, Done with one."""
    state = default_state()
    state = operations.add_column(state, "To Do", ids).state
    state = operations.add_column(state, "Done", ids).state
    state = operations.add_task(state, "col-1", TaskDraft("Write docs"), ids, clock).state
    state = operations.add_task(state, "col-1", TaskDraft("Fix bug"), ids, clock).state
    state = operations.add_task(state, "col-2", TaskDraft("Ship it"), ids, clock).state
    return state


@pytest.fixture
def ids():
    return SequentialIds()


# --- Scenario ---


def test_add_column_add_task_delete_column_scenario(ids):
    state = default_state()

    outcome = operations.add_column(state, "To Do", ids)
    assert outcome.changed
    c1 = outcome.created_id
    state = outcome.state

    outcome = operations.add_task(state, c1, TaskDraft(title="Draft plan"), ids, clock)
    t1 = outcome.created_id
    state = outcome.state

    assert state.board.column_order == (c1,)
    assert state.columns[c1].task_ids == (t1,)
    assert state.tasks[t1].is_completed is False

    state = operations.delete_column(state, c1).state

    assert state.board.column_order == ()
    assert dict(state.columns) == {}
    assert dict(state.tasks) == {}


# --- Columns ---


def test_add_column_appends_empty_column(ids):
    state = operations.add_column(default_state(), "To Do", ids).state
    state = operations.add_column(state, "Done", ids).state

    assert state.board.column_order == ("col-1", "col-2")
    assert state.columns["col-2"] == Column(id="col-2", name="Done", task_ids=())


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_add_column_rejects_blank_name(ids, name):
    with pytest.raises(InvalidInputError):
        operations.add_column(default_state(), name, ids)


def test_add_column_trims_name(ids):
    state = operations.add_column(default_state(), " Sprint 1 ", ids).state

    assert state.columns["col-1"].name == "Sprint 1"


def test_add_column_skips_taken_ids():
    # Generator that hands out an id already on the board first
    handed = iter(["col-1", "col-1", "col-9"])
    state = operations.add_column(default_state(), "A", lambda kind: next(handed)).state
    outcome = operations.add_column(state, "B", lambda kind: next(handed))

    assert outcome.created_id == "col-9"
    assert state.board.column_order == ("col-1",)


def test_update_column_name_renames_in_place(ids):
    state = two_column_board(ids)

    outcome = operations.update_column_name(state, "col-1", "  Backlog ")

    assert outcome.changed
    assert outcome.state.columns["col-1"].name == "Backlog"
    assert outcome.state.columns["col-1"].task_ids == state.columns["col-1"].task_ids
    assert outcome.state.board.column_order == state.board.column_order


def test_update_column_name_rejects_blank(ids):
    state = two_column_board(ids)

    with pytest.raises(InvalidInputError):
        operations.update_column_name(state, "col-1", "  ")


def test_update_column_name_unknown_column_is_noop(ids):
    state = two_column_board(ids)

    # Stale reference wins over validation
    outcome = operations.update_column_name(state, "col-404", "")

    assert not outcome.changed
    assert outcome.state is state


def test_update_column_name_same_name_is_unchanged(ids):
    state = two_column_board(ids)

    assert not operations.update_column_name(state, "col-1", "To Do").changed


def test_delete_column_cascades_only_its_tasks(ids):
    state = two_column_board(ids)

    state = operations.delete_column(state, "col-1").state

    assert state.board.column_order == ("col-2",)
    assert set(state.tasks) == {"task-3"}
    assert state.columns["col-2"].task_ids == ("task-3",)
    assert find_violations(state) == []


def test_delete_column_unknown_is_noop(ids):
    state = two_column_board(ids)

    outcome = operations.delete_column(state, "col-404")

    assert not outcome.changed
    assert outcome.state == state


def test_delete_column_strips_duplicated_reference():
    task = Task(id="t1", title="Shared")
    state = BoardState(
        board=Board(id="b", name="Board", column_order=("a", "b")),
        columns={
            "a": Column(id="a", name="A", task_ids=("t1",)),
            "b": Column(id="b", name="B", task_ids=("t1",)),
        },
        tasks={"t1": task},
    )

    state = operations.delete_column(state, "a").state

    assert state.columns["b"].task_ids == ()
    assert "t1" not in state.tasks
    assert find_violations(state) == []


# --- Tasks ---


def test_add_task_sets_defaults(ids):
    state = operations.add_column(default_state(), "To Do", ids).state

    outcome = operations.add_task(state, "col-1", TaskDraft("  Draft plan "), ids, clock)
    task = outcome.state.tasks[outcome.created_id]

    assert task.title == "Draft plan"
    assert task.is_completed is False
    assert task.priority is Priority.NONE
    assert task.description is None
    assert task.due_date is None
    assert task.created_at == NOW


def test_add_task_appends_to_column(ids):
    state = two_column_board(ids)

    assert state.columns["col-1"].task_ids == ("task-1", "task-2")


def test_add_task_with_all_fields(ids):
    state = operations.add_column(default_state(), "To Do", ids).state
    draft = TaskDraft(
        title="Release",
        description="Tag and publish",
        priority=Priority.HIGH,
        due_date=datetime(2024, 4, 2, 15, 0),
    )

    task = operations.add_task(state, "col-1", draft, ids, clock).state.tasks["task-1"]

    assert task.description == "Tag and publish"
    assert task.priority is Priority.HIGH
    assert task.due_date == date(2024, 4, 2)


def test_add_task_accepts_priority_string(ids):
    state = operations.add_column(default_state(), "To Do", ids).state

    outcome = operations.add_task(state, "col-1", TaskDraft("A", priority="Low"), ids, clock)

    assert outcome.state.tasks["task-1"].priority is Priority.LOW


@pytest.mark.parametrize("draft", [
    TaskDraft(""),
    TaskDraft("   "),
    TaskDraft("Ok", priority="Urgent"),
    TaskDraft("Ok", due_date="tomorrow"),
])
def test_add_task_rejects_invalid_draft(ids, draft):
    state = operations.add_column(default_state(), "To Do", ids).state

    with pytest.raises(InvalidInputError):
        operations.add_task(state, "col-1", draft, ids, clock)


def test_add_task_unknown_column_is_noop(ids):
    state = two_column_board(ids)

    outcome = operations.add_task(state, "col-404", TaskDraft("Lost"), ids, clock)

    assert not outcome.changed
    assert outcome.created_id is None
    assert outcome.state is state


def test_add_then_delete_task_restores_state(ids):
    state = two_column_board(ids)

    outcome = operations.add_task(state, "col-2", TaskDraft("Temp"), ids, clock)
    restored = operations.delete_task(outcome.state, outcome.created_id).state

    assert restored == state


def test_update_task_merges_fields(ids):
    state = two_column_board(ids)

    outcome = operations.update_task(
        state, "task-1",
        title=" Write better docs ",
        is_completed=True,
        priority=Priority.MEDIUM,
        due_date=date(2024, 5, 1),
    )
    task = outcome.state.tasks["task-1"]

    assert outcome.changed
    assert task.title == "Write better docs"
    assert task.is_completed is True
    assert task.priority is Priority.MEDIUM
    assert task.due_date == date(2024, 5, 1)
    assert task.created_at == NOW
    assert outcome.state.columns["col-1"].task_ids == ("task-1", "task-2")


def test_update_task_clears_optional_fields(ids):
    state = two_column_board(ids)
    state = operations.update_task(state, "task-1", description="Notes", due_date=date(2024, 5, 1)).state

    state = operations.update_task(state, "task-1", description="", due_date=None).state

    assert state.tasks["task-1"].description is None
    assert state.tasks["task-1"].due_date is None


def test_update_task_unknown_id_is_noop(ids):
    state = two_column_board(ids)

    outcome = operations.update_task(state, "task-404", title="Anything")

    assert not outcome.changed
    assert outcome.state == state


def test_update_task_same_values_is_unchanged(ids):
    state = two_column_board(ids)

    outcome = operations.update_task(state, "task-1", title="Write docs", is_completed=False)

    assert not outcome.changed
    assert outcome.state is state


@pytest.mark.parametrize("fields", [
    {"title": ""},
    {"title": None},
    {"priority": "Critical"},
    {"is_completed": "yes"},
    {"due_date": "2024-01-01"},
    {"id": "task-99"},
    {"created_at": NOW},
])
def test_update_task_rejects_invalid_fields(ids, fields):
    state = two_column_board(ids)

    with pytest.raises(InvalidInputError):
        operations.update_task(state, "task-1", **fields)


def test_delete_task_removes_everywhere(ids):
    state = two_column_board(ids)

    state = operations.delete_task(state, "task-1").state

    assert "task-1" not in state.tasks
    assert state.columns["col-1"].task_ids == ("task-2",)


def test_delete_task_strips_duplicated_reference():
    state = BoardState(
        board=Board(id="b", name="Board", column_order=("a", "b")),
        columns={
            "a": Column(id="a", name="A", task_ids=("t1", "t2")),
            "b": Column(id="b", name="B", task_ids=("t1",)),
        },
        tasks={"t1": Task(id="t1", title="Shared"), "t2": Task(id="t2", title="Other")},
    )

    state = operations.delete_task(state, "t1").state

    assert state.columns["a"].task_ids == ("t2",)
    assert state.columns["b"].task_ids == ()
    assert find_violations(state) == []


def test_delete_task_listed_nowhere_is_noop():
    state = BoardState(
        board=Board(id="b", name="Board"),
        tasks={"t1": Task(id="t1", title="Orphan")},
    )

    assert not operations.delete_task(state, "t1").changed


def test_delete_task_unknown_is_noop(ids):
    state = two_column_board(ids)

    assert operations.delete_task(state, "task-404").state is state


# --- Board ---


def test_update_board_name(ids):
    state = operations.update_board_name(default_state(), "  Sprint 12 ").state

    assert state.board.name == "Sprint 12"


def test_update_board_name_rejects_blank():
    with pytest.raises(InvalidInputError):
        operations.update_board_name(default_state(), "")


# --- Reordering ---


def test_reorder_columns_applies_permutation(ids):
    state = two_column_board(ids)

    state = operations.reorder_columns(state, ["col-2", "col-1"]).state

    assert state.board.column_order == ("col-2", "col-1")


@pytest.mark.parametrize("order", [
    ["col-1"],
    ["col-1", "col-1"],
    ["col-1", "col-2", "col-3"],
    ["col-1", "col-404"],
])
def test_reorder_columns_ignores_non_permutation(ids, order):
    state = two_column_board(ids)

    assert not operations.reorder_columns(state, order).changed


def test_reorder_tasks(ids):
    state = two_column_board(ids)

    state = operations.reorder_tasks(state, "col-1", ("task-2", "task-1")).state

    assert state.columns["col-1"].task_ids == ("task-2", "task-1")


def test_reorder_tasks_cannot_move_task_between_columns(ids):
    state = two_column_board(ids)

    outcome = operations.reorder_tasks(state, "col-1", ("task-1", "task-2", "task-3"))

    assert not outcome.changed


@pytest.mark.parametrize("index,expected", [
    (0, ("col-3", "col-1", "col-2")),
    (1, ("col-1", "col-3", "col-2")),
    (99, ("col-1", "col-2", "col-3")),
    (-5, ("col-3", "col-1", "col-2")),
])
def test_move_column_clamps_index(ids, index, expected):
    state = two_column_board(ids)
    state = operations.add_column(state, "Later", ids).state

    state = operations.move_column(state, "col-3", index).state

    assert state.board.column_order == expected


def test_move_task_within_column(ids):
    state = two_column_board(ids)

    state = operations.move_task(state, "task-2", 0).state

    assert state.columns["col-1"].task_ids == ("task-2", "task-1")
    assert state.columns["col-2"].task_ids == ("task-3",)


def test_move_unknown_entities_is_noop(ids):
    state = two_column_board(ids)

    assert not operations.move_task(state, "task-404", 0).changed
    assert not operations.move_column(state, "col-404", 0).changed


# --- Dispatch ---


def test_apply_dispatches_operation_values(ids):
    state = operations.apply(default_state(), operations.AddColumn("To Do"), ids, clock).state
    outcome = operations.apply(state, operations.AddTask("col-1", TaskDraft("A")), ids, clock)

    assert outcome.created_id == "task-1"
    assert outcome.state.columns["col-1"].task_ids == ("task-1",)


def test_apply_rejects_unknown_operation():
    with pytest.raises(TypeError):
        operations.apply(default_state(), "add column please")


def test_operations_reject_non_snapshot():
    with pytest.raises(TypeError):
        operations.delete_task({"board": {}}, "task-1")


def test_operations_never_mutate_input(ids):
    state = two_column_board(ids)
    before = state.to_dict()

    operations.delete_column(state, "col-1")
    operations.update_task(state, "task-3", title="Changed")
    operations.move_task(state, "task-2", 0)

    assert state.to_dict() == before


# --- Random sequences ---


def random_operation(rng, state, counter):
    """Pick an operation, sometimes aimed at ids that no longer exist."""
    column_ids = list(state.columns) + ["col-stale"]
    task_ids = list(state.tasks) + ["task-stale"]
    choice = rng.randrange(9)

    if choice == 0 or not state.columns:
        return operations.AddColumn(rng.choice(["To Do", "Doing", "Done", " Later "]))
    if choice == 1:
        return operations.AddTask(rng.choice(column_ids), TaskDraft(f"Task {next(counter)}"))
    if choice == 2:
        return operations.UpdateTask(rng.choice(task_ids), {"is_completed": rng.random() < 0.5})
    if choice == 3:
        return operations.DeleteTask(rng.choice(task_ids))
    if choice == 4:
        return operations.DeleteColumn(rng.choice(column_ids))
    if choice == 5:
        return operations.UpdateColumnName(rng.choice(column_ids), rng.choice(["Renamed", ""]))
    if choice == 6:
        order = list(state.board.column_order)
        rng.shuffle(order)
        return operations.ReorderColumns(tuple(order))
    if choice == 7:
        return operations.MoveTask(rng.choice(task_ids), rng.randrange(-1, 5))
    return operations.AddTask(rng.choice(column_ids), TaskDraft(rng.choice(["", "  ", "Real"])))


@pytest.mark.parametrize("seed", range(20))
def test_random_sequences_keep_board_consistent(seed):
    rng = random.Random(seed)
    ids = SequentialIds()
    counter = iter(range(10_000))
    state = default_state()

    for _ in range(150):
        op = random_operation(rng, state, counter)
        try:
            state = operations.apply(state, op, ids, clock).state
        except InvalidInputError:
            pass
        assert find_violations(state) == [], f"after {op!r}"
