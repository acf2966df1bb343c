"""
FILE: kanbo/core/store.py
PURPOSE: Explicit state container holding the current board snapshot
EXPORTS:
  - Result (dataclass returned by every mutation)
  - BoardStore (get_state, dispatch, subscribe, one method per operation)
DEPENDENCIES:
  - kanbo.core.operations (pure mutations and operation values)
  - kanbo.core.persistence (BoardPersistence, default_state)
  - kanbo.core.ids (IdGenerator, uuid_ids)
  - kanbo.core.exceptions (InvalidInputError)
  - logging (stdlib)
NOTES:
  - No module-level store: callers hold a BoardStore instance
  - Commit order: swap snapshot, save (best effort), notify subscribers
  - Validation failures come back as Result(ok=False, error=...), state untouched
  - Stale ids come back as Result(ok=True, changed=False)
  - Subscribers only hear about snapshots that actually changed
  - A failing subscriber is logged; the others are still notified and the
    commit stands
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Union

from . import operations
from .exceptions import InvalidInputError
from .ids import IdGenerator, uuid_ids
from .models import BoardState, TaskDraft
from .operations import Clock, utc_now
from .persistence import BoardPersistence, default_state


logger = logging.getLogger(__name__)

Listener = Callable[[BoardState], None]


@dataclass(frozen=True)
class Result:
    """
    Outcome of a store mutation.

    Attributes:
        ok: False only when the operation was rejected by validation
        state: Snapshot after the operation (the committed one)
        changed: Whether a new snapshot was committed
        created_id: Id of a task or column created by the operation
        error: Validation message when ok is False
    """
    ok: bool
    state: BoardState
    changed: bool = False
    created_id: Optional[str] = None
    error: Optional[str] = None


class BoardStore:
    """
    Holds the canonical snapshot and applies operations to it.

    Args:
        state: Initial snapshot (defaults to an empty board)
        ids: Id generator for new columns and tasks
        clock: Source of created_at timestamps
        persistence: Adapter saving every committed snapshot, or None
    """

    def __init__(
        self,
        state: Optional[BoardState] = None,
        ids: IdGenerator = uuid_ids,
        clock: Clock = utc_now,
        persistence: Optional[BoardPersistence] = None,
    ):
        if state is None:
            state = default_state()
        if not isinstance(state, BoardState):
            raise TypeError(f"Expected a BoardState snapshot, got {type(state).__name__}")

        self._state = state
        self._ids = ids
        self._clock = clock
        self._persistence = persistence
        self._listeners: List[Listener] = []

    @classmethod
    def open(
        cls,
        persistence: BoardPersistence,
        ids: IdGenerator = uuid_ids,
        clock: Clock = utc_now,
    ) -> "BoardStore":
        """Create a store from the persisted snapshot and keep saving to it."""
        return cls(persistence.load(), ids=ids, clock=clock, persistence=persistence)

    # --- Reading ---

    def get_state(self) -> BoardState:
        """Current committed snapshot."""
        return self._state

    @property
    def state(self) -> BoardState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with every newly committed snapshot.

        Returns:
            A function that removes the listener (safe to call twice)
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Mutating ---

    def dispatch(self, operation: Any) -> Result:
        """
        Apply one operation value and commit the result.

        Raises:
            TypeError: For an unknown operation type (programmer error)
        """
        try:
            outcome = operations.apply(self._state, operation, self._ids, self._clock)
        except InvalidInputError as e:
            logger.info("Rejected %s: %s", type(operation).__name__, e)
            return Result(ok=False, state=self._state, error=str(e))

        if outcome.changed:
            self._commit(outcome.state)
            logger.debug("Committed %r", operation)
        else:
            logger.debug("No-op %r", operation)

        return Result(
            ok=True,
            state=self._state,
            changed=outcome.changed,
            created_id=outcome.created_id,
        )

    def _commit(self, state: BoardState) -> None:
        self._state = state
        if self._persistence is not None:
            self._persistence.save(state)
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Listener %r failed on committed snapshot", listener)

    # --- Operation shortcuts ---

    def add_task(self, column_id: str, draft: Union[TaskDraft, str], **fields: Any) -> Result:
        """
        Add a task to a column.

        draft may be a TaskDraft or a title, in which case fields fill in the
        rest of the draft (description, priority, due_date).
        """
        if isinstance(draft, str):
            draft = TaskDraft(title=draft, **fields)
        return self.dispatch(operations.AddTask(column_id, draft))

    def update_task(self, task_id: str, **fields: Any) -> Result:
        return self.dispatch(operations.UpdateTask(task_id, fields))

    def delete_task(self, task_id: str) -> Result:
        return self.dispatch(operations.DeleteTask(task_id))

    def add_column(self, name: str) -> Result:
        return self.dispatch(operations.AddColumn(name))

    def update_column_name(self, column_id: str, name: str) -> Result:
        return self.dispatch(operations.UpdateColumnName(column_id, name))

    def delete_column(self, column_id: str) -> Result:
        """Delete a column and all of its tasks. Callers confirm beforehand."""
        return self.dispatch(operations.DeleteColumn(column_id))

    def update_board_name(self, name: str) -> Result:
        return self.dispatch(operations.UpdateBoardName(name))

    def reorder_columns(self, column_order: Sequence[str]) -> Result:
        return self.dispatch(operations.ReorderColumns(tuple(column_order)))

    def reorder_tasks(self, column_id: str, task_ids: Sequence[str]) -> Result:
        return self.dispatch(operations.ReorderTasks(column_id, tuple(task_ids)))

    def move_column(self, column_id: str, index: int) -> Result:
        return self.dispatch(operations.MoveColumn(column_id, index))

    def move_task(self, task_id: str, index: int) -> Result:
        return self.dispatch(operations.MoveTask(task_id, index))
