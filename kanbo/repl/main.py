"""
FILE: kanbo/repl/main.py
PURPOSE: Interactive REPL for the board with prompt-toolkit
EXPORTS:
  - REPLContext (session state: store and current column)
  - repl_context (module-level session context)
  - console (rich console used by every handler)
  - execute_command(result) -> bool
  - run_repl() - Main REPL loop
  - main() - Entry point for REPL mode
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - kanbo.core.service (store wiring)
  - kanbo.repl.parser (command parsing)
  - kanbo.repl.completer (autocomplete)
NOTES:
  - One BoardStore is opened per session and saves after every change
  - Command history automatic with PromptSession
  - Bottom toolbar shows board counts
  - Falls back to plain input() without a TTY
  - Ctrl+D or "exit"/"quit" to exit
"""

import sys
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from ..core import service
from ..core.models import Column
from ..core.store import BoardStore
from .parser import parse_command, ParseResult
from .completer import create_completer


# Rich console for formatted output
console = Console()


# --- REPL Context (Persistent State) ---


@dataclass
class REPLContext:
    """
    Persistent context for the REPL session.

    Attributes:
        store: Board store for the session (opened on first use)
        current_column_id: Column that 'add' targets when no --column is given
    """
    store: Optional[BoardStore] = None
    current_column_id: Optional[str] = None

    def get_store(self) -> BoardStore:
        """Return the session store, opening the persisted board on first use."""
        if self.store is None:
            self.store = service.open_store()
        return self.store

    def current_column(self) -> Optional[Column]:
        """The selected column, or None if unset or deleted since."""
        if self.current_column_id is None:
            return None
        return self.get_store().get_state().columns.get(self.current_column_id)

    def get_prompt(self) -> str:
        """
        Generate prompt string based on current context.

        Returns:
            Prompt like "kanbo> " or "kanbo:[In Progress]> "
        """
        column = self.current_column()
        if column:
            return f"kanbo:[{column.name}]> "
        return "kanbo> "


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()


def format_prompt() -> HTML:
    """Prompt with the current column in cyan."""
    column = repl_context.current_column()
    if column:
        return HTML("<b>kanbo:[<cyan>{}</cyan>]&gt; </b>").format(column.name)
    return HTML("<b>kanbo&gt; </b>")


def get_bottom_toolbar() -> HTML:
    """Toolbar with board counts."""
    counts = service.board_counts(repl_context.get_store().get_state())
    text = (
        f"{counts['columns']} column(s) | {counts['tasks']} task(s) | "
        f"{counts['completed']} done | 'help' for commands"
    )
    return HTML(f"<style bg='#444444' fg='#ffffff'> {text} </style>")


# Import command handlers from command modules
from .commands import (
    # Task handlers
    handle_add_command,
    handle_edit_command,
    handle_done_command,
    handle_undone_command,
    handle_rm_command,
    handle_view_command,
    handle_mv_command,
    # Board and column handlers
    handle_show_command,
    handle_rename_command,
    handle_column_command,
    handle_use_command,
    # System handlers
    handle_help_command,
    handle_clear_command,
)


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    # Empty command (just Enter pressed)
    if not command:
        return True

    handlers = {
        "add": handle_add_command,
        "edit": handle_edit_command,
        "done": handle_done_command,
        "undone": handle_undone_command,
        "rm": handle_rm_command,
        "view": handle_view_command,
        "mv": handle_mv_command,
        "show": handle_show_command,
        "ls": handle_show_command,
        "rename": handle_rename_command,
        "column": handle_column_command,
        "use": handle_use_command,
        "help": handle_help_command,
        "clear": handle_clear_command,
    }

    handler = handlers.get(command)
    if handler:
        handler(result)
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


def run_repl() -> None:
    """
    Main REPL loop.

    Exits on Ctrl+D (EOFError) or the "exit"/"quit" commands. Ctrl+C only
    cancels the current line.
    """
    has_tty = sys.stdin.isatty() and sys.stdout.isatty()
    session = None

    if has_tty:
        session = PromptSession(
            history=InMemoryHistory(),
            completer=create_completer(repl_context),
            complete_while_typing=True,
            bottom_toolbar=get_bottom_toolbar,
        )

    console.print("[bold cyan]kanbo REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if session is None:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    while True:
        try:
            if session is None:
                user_input = input(repl_context.get_prompt())
            else:
                user_input = session.prompt(format_prompt())

            if not execute_command(parse_command(user_input)):
                break

        except KeyboardInterrupt:
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
            continue
        except EOFError:
            console.print()
            console.print("[dim]Goodbye![/dim]")
            break


def main() -> None:
    """
    Entry point for REPL mode.

    Called when user runs: kanbo repl (or just kanbo)
    """
    try:
        run_repl()
    except Exception as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
