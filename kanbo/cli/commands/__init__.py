"""
FILE: kanbo/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all commands for easy importing
from .system import (
    version,
    repl,
)
from .board import (
    show,
    rename,
)
from .tasks import (
    add,
    edit,
    done,
    undone,
    rm,
    view,
    mv,
)
from .columns import (
    column_add,
    column_ls,
    column_rename,
    column_rm,
    column_mv,
)

__all__ = [
    "version",
    "repl",
    "show",
    "rename",
    "add",
    "edit",
    "done",
    "undone",
    "rm",
    "view",
    "mv",
    "column_add",
    "column_ls",
    "column_rename",
    "column_rm",
    "column_mv",
]
