# src/todo_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

NO_DUE_DATE = "N/A"

MAX_TITLE_LEN = 255
MAX_CATEGORY_LEN = 49

MIN_PRIORITY = 1
MAX_PRIORITY = 5


class Recurrence(StrEnum):
    """
    How a task's due date rolls forward when it is completed.

    The values double as the on-disk tokens of the record file.
    """

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_name(cls, raw: str | None) -> Recurrence | None:
        """Exact lowercase token -> Recurrence, or None when unknown."""
        if raw is None:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


class SortKey(StrEnum):
    PRIORITY = "priority"
    DUE_DATE = "due_date"


@dataclass(slots=True)
class Task:
    id: int
    title: str
    category: str
    due_date: str = NO_DUE_DATE
    recurrence: Recurrence = Recurrence.NONE
    priority: int = 3
    completed: bool = False

    @property
    def has_due_date(self) -> bool:
        return self.due_date != NO_DUE_DATE

    def snapshot(self) -> Task:
        """Independent full-value copy."""
        return replace(self)
