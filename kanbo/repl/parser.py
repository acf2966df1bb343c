"""
FILE: kanbo/repl/parser.py
PURPOSE: Parse user input into commands and arguments for REPL
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
  - SHORT_FLAGS: single-dash aliases
  - BOOLEAN_FLAGS: flags that never consume a value
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
  - typing (type hints)
NOTES:
  - Handles quoted strings: add "task with spaces"
  - Supports long flags (--priority high) and the short aliases in SHORT_FLAGS
  - A lone "-" or a negative number is a positional argument, not a flag
  - Case-insensitive command names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Union


# Single-dash aliases accepted by the REPL (mirrors the CLI options)
SHORT_FLAGS = {
    "c": "column",
    "d": "desc",
    "p": "priority",
    "y": "yes",
}

# Flags that never take a value
BOOLEAN_FLAGS = {"yes", "json"}


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: The command name (e.g., "add", "done", "column")
        args: Positional arguments (e.g., ["task title", "3"])
        flags: Flag arguments as dict (e.g., {"priority": "high", "yes": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    raw_input: str = ""


def _flag_name(token: str) -> str:
    """Return the flag name for a token, or '' if the token is not a flag."""
    if token.startswith("--") and len(token) > 2:
        return token[2:]
    if token.startswith("-") and len(token) == 2 and token[1] in SHORT_FLAGS:
        return SHORT_FLAGS[token[1]]
    return ""


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and flags.

    Examples:
        >>> parse_command('add "Write docs" -p high')
        ParseResult(command="add", args=["Write docs"], flags={"priority": "high"})

        >>> parse_command("column rm Done --yes")
        ParseResult(command="column", args=["rm", "Done"], flags={"yes": True})

    Notes:
        - Command is always the first token (case-insensitive)
        - A flag followed by a non-flag token takes it as its value
        - A flag followed by another flag (or nothing) is boolean True,
          as is any flag in BOOLEAN_FLAGS
        - Quoted strings are treated as single args
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        # Unclosed quote: fall back to whitespace splitting
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", raw_input=input_str)

    command = tokens[0].lower()
    args: List[str] = []
    flags: Dict[str, Union[str, bool]] = {}

    i = 1
    while i < len(tokens):
        name = _flag_name(tokens[i])
        if not name:
            args.append(tokens[i])
            i += 1
            continue

        if name not in BOOLEAN_FLAGS and i + 1 < len(tokens) and not _flag_name(tokens[i + 1]):
            flags[name] = tokens[i + 1]
            i += 2
        else:
            flags[name] = True
            i += 1

    return ParseResult(command=command, args=args, flags=flags, raw_input=input_str)
