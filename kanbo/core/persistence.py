"""
FILE: kanbo/core/persistence.py
PURPOSE: Save and restore the board snapshot as a versioned JSON record
EXPORTS:
  - default_state() -> BoardState
  - encode_record(state) -> str
  - decode_record(payload) -> BoardState
  - migrate(record) -> dict
  - MIGRATIONS: {from_version: step}
  - BoardPersistence (save/load against a StorageBackend)
DEPENDENCIES:
  - json, logging (stdlib)
  - kanbo.core.models (BoardState, Board)
  - kanbo.core.invariants (repair)
  - kanbo.core.repository (StorageBackend)
  - kanbo.core.exceptions (CorruptStateError)
NOTES:
  - Record layout: {"version": 1, "state": {"board", "columns", "tasks"}}
  - save() is best effort: any backend failure is logged, never raised
  - load() never fails startup: missing or corrupt records give default_state()
  - Records from a newer schema are read as the current one, with a warning
"""

import json
import logging
from typing import Any, Callable, Dict, Mapping

from .constants import DEFAULT_BOARD_ID, DEFAULT_BOARD_NAME, SCHEMA_VERSION, STORAGE_KEY
from .exceptions import CorruptStateError
from .invariants import repair
from .models import Board, BoardState
from .repository import StorageBackend


logger = logging.getLogger(__name__)


def default_state() -> BoardState:
    """Empty board with the default name, no columns and no tasks."""
    return BoardState(board=Board(id=DEFAULT_BOARD_ID, name=DEFAULT_BOARD_NAME))


# --- Migrations ---


def _wrap_unversioned(record: Dict[str, Any]) -> Dict[str, Any]:
    """Version 0: the bare state object, written before records were versioned."""
    return {"version": 1, "state": record}


# Each step takes a record at version N and returns one at version N + 1
MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    0: _wrap_unversioned,
}


def migrate(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a decoded record up to SCHEMA_VERSION.

    A record without a "version" key is treated as version 0.

    Raises:
        CorruptStateError: If the version is not an integer or a step is missing
    """
    version = record.get("version", 0) if "state" in record else 0
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise CorruptStateError(f"Invalid record version: {version!r}")

    if version > SCHEMA_VERSION:
        logger.warning(
            "Stored board uses schema version %d (newer than %d); reading it as version %d",
            version, SCHEMA_VERSION, SCHEMA_VERSION,
        )
        return record

    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise CorruptStateError(f"No migration from schema version {version}")
        logger.info("Migrating stored board from schema version %d", version)
        record = step(record)
        version += 1

    return record


# --- Encoding ---


def encode_record(state: BoardState) -> str:
    """Serialize a snapshot to the persisted JSON string."""
    return json.dumps({"version": SCHEMA_VERSION, "state": state.to_dict()})


def decode_record(payload: str) -> BoardState:
    """
    Parse a persisted JSON string into a snapshot.

    Raises:
        CorruptStateError: If the payload is not valid JSON or has the wrong shape
    """
    try:
        record = json.loads(payload)
    except (TypeError, ValueError, RecursionError) as e:
        raise CorruptStateError(f"Stored board is not valid JSON: {e}") from e

    if not isinstance(record, Mapping):
        raise CorruptStateError("Stored board is not a JSON object")

    record = migrate(dict(record))
    state = record.get("state")
    if not isinstance(state, Mapping):
        raise CorruptStateError("Stored board has no 'state' object")

    try:
        return BoardState.from_dict(state)
    except (KeyError, TypeError, ValueError, AttributeError, RecursionError) as e:
        raise CorruptStateError(f"Stored board is malformed: {e!r}") from e


class BoardPersistence:
    """
    Persistence adapter for one storage slot.

    Args:
        storage: Backend exposing get(key) and set(key, value)
        key: Slot name (defaults to STORAGE_KEY)
    """

    def __init__(self, storage: StorageBackend, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key

    def save(self, state: BoardState) -> bool:
        """
        Write the snapshot to storage, overwriting the previous record.

        Returns:
            True if written, False if the backend failed (the failure is logged)
        """
        payload = encode_record(state)
        try:
            self.storage.set(self.key, payload)
        except Exception:
            logger.exception("Failed to save board to '%s'; keeping in-memory state", self.key)
            return False

        logger.debug("Saved board to '%s' (%d bytes)", self.key, len(payload))
        return True

    def load(self) -> BoardState:
        """
        Read the snapshot from storage.

        Returns:
            The stored snapshot (repaired if needed), or default_state() when
            the slot is empty, unreadable or corrupt
        """
        try:
            payload = self.storage.get(self.key)
        except Exception:
            logger.exception("Failed to read board from '%s'; starting empty", self.key)
            return default_state()

        if payload is None:
            logger.info("No stored board under '%s'; starting empty", self.key)
            return default_state()

        try:
            state = decode_record(payload)
        except CorruptStateError as e:
            logger.error("Discarding corrupt board record under '%s': %s", self.key, e)
            return default_state()

        state, repairs = repair(state)
        for message in repairs:
            logger.warning("Repaired stored board: %s", message)

        return state
