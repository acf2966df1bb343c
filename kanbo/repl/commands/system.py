"""
FILE: kanbo/repl/commands/system.py
PURPOSE: System command handlers for REPL
"""

from rich.panel import Panel

from ..main import console
from ..parser import ParseResult


def handle_help_command(result: ParseResult) -> None:
    """
    Handle 'help' command - show available commands.

    Args:
        result: Parsed command (unused)
    """
    help_text = """
[bold cyan]Tasks:[/bold cyan]

  [cyan]add <title>[/cyan]                    Create a task in the current column
  [cyan]edit <task> [<title>][/cyan]            Change title, description, priority or due date
  [cyan]done <task>[,<task>...][/cyan]        Mark task(s) complete
  [cyan]undone <task>[,<task>...][/cyan]      Mark task(s) not complete
  [cyan]rm <task>[,<task>...][/cyan]          Delete task(s)
  [cyan]view <task>[/cyan]                    Show every field of a task
  [cyan]mv <task> <position>[/cyan]           Reposition a task within its column

[bold cyan]Board and columns:[/bold cyan]

  [cyan]show[/cyan] or [cyan]ls[/cyan]                     Render the board
  [cyan]rename <name>[/cyan]                  Rename the board
  [cyan]column add <name>[/cyan]              Add a column at the right end
  [cyan]column ls[/cyan]                      List columns
  [cyan]column rename <col> <name>[/cyan]     Rename a column
  [cyan]column rm <col> [--yes][/cyan]        Delete a column and its tasks
  [cyan]column mv <col> <position>[/cyan]     Move a column
  [cyan]use <col>[/cyan]                      Pick the column 'add' uses

[bold cyan]Session:[/bold cyan]

  [cyan]help[/cyan]                           Show this help
  [cyan]clear[/cyan]                          Clear the screen
  [cyan]exit[/cyan] or [cyan]quit[/cyan]                  Exit REPL

[bold cyan]Flags:[/bold cyan]

  [cyan]--column, -c <col>[/cyan]             Target column for add
  [cyan]--desc, -d <text>[/cyan]              Task description
  [cyan]--priority, -p <level>[/cyan]         none, low, medium or high
  [cyan]--due <date>[/cyan]                   YYYY-MM-DD, today, tomorrow, +N or none

[bold cyan]Examples:[/bold cyan]

  [dim]column add "To Do"
  add "Write release notes" -p high --due +3
  add Fix login --column "In Progress"
  edit 2 --due none
  done 1,2
  mv 4 1                      # Task #4 to the top of its column
  column mv Done 1
  use "In Progress"[/dim]

[bold yellow]Task references:[/bold yellow]
  [dim]A task is named by its board number (#3 or 3, counted left to right
  and top to bottom) or by a unique prefix of its id. Columns are named by
  name, 1-based position or id.[/dim]
"""
    console.print(Panel(help_text, title="kanbo REPL Help", border_style="cyan"))


def handle_clear_command(result: ParseResult) -> None:
    """
    Clear the screen.

    Args:
        result: Parsed command (no arguments used)
    """
    console.clear()
    console.print("[dim]Screen cleared[/dim]")
