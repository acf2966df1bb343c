"""
FILE: kanbo/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - KanboCompleter (Completer for command/arg completion)
  - create_completer(context) -> KanboCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - typing (type hints)
  - kanbo.core.service (task numbering)
NOTES:
  - Suggests command names when at start of line
  - Suggests column subcommands after "column"
  - Suggests column names after "use", "--column" and "column rename|rm|mv"
  - Suggests priority values after "--priority"/"-p"
  - Suggests task numbers for commands expecting a task
  - Case-insensitive matching
"""

from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core import service
from ..core.models import Priority


class KanboCompleter(Completer):
    """
    Custom completer for the kanbo REPL.

    Reads the board from the session context on every keystroke, so
    suggestions follow the live state.
    """

    COMMANDS = [
        "add", "edit", "done", "undone", "rm", "view", "mv", "show", "ls",
        "rename", "column", "use", "help", "clear", "exit", "quit",
    ]

    COLUMN_SUBCOMMANDS = ["add", "ls", "rename", "rm", "mv"]

    # Commands whose first argument names a task
    TASK_FIRST_COMMANDS = {"edit", "done", "undone", "rm", "view", "mv"}

    COMMAND_FLAGS = {
        "add": ["--column", "--desc", "--priority", "--due"],
        "edit": ["--desc", "--priority", "--due"],
        "column": ["--yes"],
    }

    COMMAND_DESCRIPTIONS = {
        "add": "Create a new task",
        "edit": "Change task fields",
        "done": "Mark task as complete",
        "undone": "Mark task as not complete",
        "rm": "Delete task",
        "view": "View full task details",
        "mv": "Reposition task in its column",
        "show": "Render the board",
        "ls": "Render the board",
        "rename": "Rename the board",
        "column": "Manage columns",
        "use": "Set target column for add",
        "help": "Show available commands",
        "clear": "Clear the screen",
        "exit": "Exit REPL",
        "quit": "Exit REPL",
    }

    def __init__(self, context):
        self.context = context

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        at_new_word = text_before_cursor.endswith(" ")

        if not words or (not at_new_word and len(words) == 1):
            yield from self._complete_from(self.COMMANDS, words[0] if words else "", self.COMMAND_DESCRIPTIONS)
            return

        command = words[0].lower()
        word = "" if at_new_word else words[-1]
        # Number of positional words before the one being typed
        position = len(words) if at_new_word else len(words) - 1
        previous = words[position - 1] if position >= 1 else ""

        if previous in ("--priority", "-p"):
            yield from self._complete_from([p.value.lower() for p in Priority], word)
            return

        if previous in ("--column", "-c"):
            yield from self._complete_column_names(word)
            return

        if word.startswith("-"):
            yield from self._complete_from(self.COMMAND_FLAGS.get(command, []), word)
            return

        if command == "column":
            if position == 1:
                yield from self._complete_from(self.COLUMN_SUBCOMMANDS, word)
            elif position == 2 and words[1].lower() in ("rename", "rm", "mv"):
                yield from self._complete_column_names(word)
            return

        if command == "use" and position == 1:
            yield from self._complete_from(["none", "clear"], word)
            yield from self._complete_column_names(word)
            return

        if command in self.TASK_FIRST_COMMANDS and position == 1:
            yield from self._complete_task_numbers(word)

    @staticmethod
    def _complete_from(options: List[str], word: str, descriptions=None) -> Iterable[Completion]:
        word_lower = word.lower()
        for option in options:
            if option.startswith(word_lower):
                yield Completion(
                    option,
                    start_position=-len(word),
                    display=option,
                    display_meta=(descriptions or {}).get(option, ""),
                )

    def _complete_column_names(self, word: str) -> Iterable[Completion]:
        """
        Complete column names.

        Notes:
            - Quotes names that contain spaces
            - Matches even when the user has already typed an opening quote
        """
        word_lower = word.strip('"').strip("'").lower()
        state = self.context.get_store().get_state()

        for index, column in enumerate(state.ordered_columns(), start=1):
            if not column.name.lower().startswith(word_lower):
                continue
            text = f'"{column.name}"' if " " in column.name else column.name
            yield Completion(
                text,
                start_position=-len(word),
                display=text,
                display_meta=f"Column {index} ({len(column.task_ids)} task(s))",
            )

    def _complete_task_numbers(self, word: str) -> Iterable[Completion]:
        """Complete task numbers with title and column labels."""
        word = word.lstrip("#")
        state = self.context.get_store().get_state()

        for number, task, column in service.numbered_tasks(state)[:200]:
            text = str(number)
            if not text.startswith(word):
                continue
            title = task.title if len(task.title) <= 40 else task.title[:37] + "..."
            yield Completion(
                text,
                start_position=-len(word),
                display=text,
                display_meta=f"{title} [{column.name}]",
            )


def create_completer(context) -> KanboCompleter:
    """
    Create a KanboCompleter bound to a REPL session context.

    Usage:
        completer = create_completer(repl_context)
        session = PromptSession(completer=completer)
    """
    return KanboCompleter(context)
