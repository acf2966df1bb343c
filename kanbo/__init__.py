"""
FILE: kanbo/__init__.py
PURPOSE: Single-board task tracker (normalized board store, CLI and REPL)
NOTES:
  - kanbo.core holds the store and persistence; it never imports typer or rich
  - kanbo.cli and kanbo.repl are the two front ends
"""

__version__ = "0.1.0"
