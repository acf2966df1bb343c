"""
FILE: kanbo/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .tasks import (
    handle_add_command,
    handle_edit_command,
    handle_done_command,
    handle_undone_command,
    handle_rm_command,
    handle_view_command,
    handle_mv_command,
)
from .board import (
    handle_show_command,
    handle_rename_command,
    handle_column_command,
    handle_use_command,
)
from .system import (
    handle_help_command,
    handle_clear_command,
)

__all__ = [
    "handle_add_command",
    "handle_edit_command",
    "handle_done_command",
    "handle_undone_command",
    "handle_rm_command",
    "handle_view_command",
    "handle_mv_command",
    "handle_show_command",
    "handle_rename_command",
    "handle_column_command",
    "handle_use_command",
    "handle_help_command",
    "handle_clear_command",
]
