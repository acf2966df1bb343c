"""
FILE: kanbo/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - SCHEMA_VERSION: Current version of the persisted record
  - STORAGE_KEY: Storage slot holding the persisted board
  - DEFAULT_BOARD_ID / DEFAULT_BOARD_NAME: Initial board identity
  - ENTITY_BOARD / ENTITY_COLUMN / ENTITY_TASK: Entity kinds passed to id generators
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
  - Bump SCHEMA_VERSION together with a new entry in persistence.MIGRATIONS
"""

# Persisted record
SCHEMA_VERSION = 1
STORAGE_KEY = "kanbo.board"

# Initial board
DEFAULT_BOARD_ID = "board-1"
DEFAULT_BOARD_NAME = "Project Tasks"

# Entity kinds (id generator argument)
ENTITY_BOARD = "board"
ENTITY_COLUMN = "column"
ENTITY_TASK = "task"

# Task fields a caller may change through update_task()
UPDATABLE_TASK_FIELDS = ("title", "description", "priority", "is_completed", "due_date")
