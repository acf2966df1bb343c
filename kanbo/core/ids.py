"""
FILE: kanbo/core/ids.py
PURPOSE: Injectable id generators for new boards, columns and tasks
EXPORTS:
  - IdGenerator (type alias: Callable[[str], str])
  - uuid_ids(kind) -> str
  - SequentialIds (deterministic generator for tests and demos)
  - new_unique_id(ids, kind, taken) -> str
DEPENDENCIES:
  - uuid, itertools (stdlib)
NOTES:
  - A generator receives the entity kind ("board", "column", "task")
  - Ids are never reused: new_unique_id() skips any id already present
"""

import itertools
import uuid
from typing import Callable, Container, Dict, Iterator, Optional

from .constants import ENTITY_BOARD, ENTITY_COLUMN, ENTITY_TASK


IdGenerator = Callable[[str], str]

# Guard against a generator that keeps returning taken ids
MAX_ID_ATTEMPTS = 1000


def uuid_ids(kind: str) -> str:
    """Default generator: random UUID4 string, kind ignored."""
    return str(uuid.uuid4())


class SequentialIds:
    """
    Deterministic generator producing 'col-1', 'col-2', 'task-1', ...

    Each kind has its own counter. Unknown kinds use the kind itself as prefix.
    """

    PREFIXES = {ENTITY_BOARD: "board", ENTITY_COLUMN: "col", ENTITY_TASK: "task"}

    def __init__(self, prefixes: Optional[Dict[str, str]] = None):
        self.prefixes = dict(self.PREFIXES)
        if prefixes:
            self.prefixes.update(prefixes)
        self._counters: Dict[str, Iterator[int]] = {}

    def __call__(self, kind: str) -> str:
        counter = self._counters.setdefault(kind, itertools.count(1))
        return f"{self.prefixes.get(kind, kind)}-{next(counter)}"


def new_unique_id(ids: IdGenerator, kind: str, taken: Container[str]) -> str:
    """
    Draw ids from the generator until one is not in 'taken'.

    Raises:
        RuntimeError: If the generator produced only taken ids
    """
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = ids(kind)
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"Id generator produced no unused {kind} id in {MAX_ID_ATTEMPTS} attempts")
