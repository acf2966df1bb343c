"""
FILE: kanbo/core/__init__.py
PURPOSE: Board store, pure operations and persistence
"""
