"""
FILE: kanbo/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - KanboError (base exception)
  - InvalidInputError
  - TaskNotFoundError
  - ColumnNotFoundError
  - StorageError
  - CorruptStateError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from KanboError for easy catching
  - Exceptions include context (IDs, keys) for helpful error messages
  - The store never raises for stale ids; the NotFound errors come from
    lookup helpers used by the CLI and REPL
"""


class KanboError(Exception):
    """Base exception for all kanbo errors."""
    pass


class InvalidInputError(KanboError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class TaskNotFoundError(KanboError):
    """No task matches the given reference."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Task '{ref}' not found")


class ColumnNotFoundError(KanboError):
    """No column matches the given reference."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Column '{ref}' not found")


class StorageError(KanboError):
    """Reading or writing the storage backend failed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Storage failure for '{key}': {reason}")


class CorruptStateError(KanboError):
    """Persisted record could not be decoded into a board state."""

    def __init__(self, message: str):
        super().__init__(message)
