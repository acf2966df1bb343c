"""
FILE: kanbo/repl/__init__.py
PURPOSE: REPL package for interactive board management
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - kanbo.core.service (store wiring)
NOTES:
  - Entry point for interactive mode
  - Provides autocomplete and command history
"""

from .main import main

__all__ = ["main"]
