# src/todo_tracker/core/errors.py

"""
Error taxonomy.

Every error carries a one-line `message` that the shell can show on its
status line as-is. Everything except AllocationFailure is recoverable.
"""

from __future__ import annotations

from pathlib import Path


class TodoError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TodoError):
    """Bad user input for a single task field (caller re-asks that field)."""

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Invalid {field.replace('_', ' ')}.")
        self.field = field


class InvalidDateFormat(ValidationError):
    def __init__(self, text: str) -> None:
        super().__init__("due_date", "Invalid date format. Use YYYY-MM-DD.")
        self.text = text


class IndexOutOfRange(TodoError):
    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Invalid task selected (index {index}, {count} tasks).")
        self.index = index
        self.count = count


class NothingToUndo(TodoError):
    def __init__(self) -> None:
        super().__init__("Nothing to undo.")


class StorageUnavailable(TodoError):
    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"Storage unavailable ({path}): {reason}. Working in memory only.")
        self.path = Path(path)
        self.reason = reason


class AllocationFailure(TodoError):
    """Out of memory while growing the task collection. Fatal."""

    def __init__(self, message: str = "Error allocating memory for tasks.") -> None:
        super().__init__(message)
