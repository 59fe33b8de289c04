# src/todo_tracker/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from ..core.errors import AllocationFailure, IndexOutOfRange, ValidationError
from . import date_rules
from .action_log import Action, ActionKind, ActionLog
from .task_models import (
    MAX_CATEGORY_LEN,
    MAX_PRIORITY,
    MAX_TITLE_LEN,
    MIN_PRIORITY,
    NO_DUE_DATE,
    Recurrence,
    SortKey,
    Task,
)

logger = logging.getLogger(__name__)

UNCHANGED: Any = object()


# ---- field validation ----


def _clean_text(value: Any, field: str, max_len: int) -> str:
    text = "" if value is None else str(value)
    if not text.strip():
        raise ValidationError(field, f"{field.capitalize()} cannot be empty.")
    if len(text) > max_len:
        logger.debug("Truncating %s to %s characters.", field, max_len)
        text = text[:max_len]
    return text


def _clean_due_date(value: Any) -> str:
    text = "" if value is None else str(value).strip()
    if text in ("", NO_DUE_DATE):
        return NO_DUE_DATE
    return date_rules.format_date(date_rules.parse_date(text))


def _clean_recurrence(value: Any) -> Recurrence:
    if isinstance(value, Recurrence):
        return value
    rec = Recurrence.from_name(str(value).strip() if value is not None else None)
    if rec is None:
        raise ValidationError(
            "recurrence",
            "Invalid recurrence. Use none, daily, weekly, biweekly, monthly or yearly.",
        )
    return rec


def _clean_priority(value: Any) -> int:
    if isinstance(value, bool):
        value = None
    try:
        prio = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        prio = 0
    if not MIN_PRIORITY <= prio <= MAX_PRIORITY:
        raise ValidationError(
            "priority",
            f"Invalid priority. Please enter a value between {MIN_PRIORITY} and {MAX_PRIORITY}.",
        )
    return prio


_VALIDATORS = {
    "title": lambda v: _clean_text(v, "title", MAX_TITLE_LEN),
    "category": lambda v: _clean_text(v, "category", MAX_CATEGORY_LEN),
    "due_date": _clean_due_date,
    "recurrence": _clean_recurrence,
    "priority": _clean_priority,
}


def validate_field(field: str, value: Any) -> Any:
    """Normalized value for a single task field, or ValidationError."""
    return _VALIDATORS[field](value)


class TaskStore:
    """
    In-memory ordered task collection.

    Invariant: after every public call returns, task.id == index + 1 for all
    tasks. Ids are display positions, not identities.

    Thread-safety:
    - `lock` is a re-entrant lock held by every public method for its whole
      duration; callers may hold it across several calls to make them atomic
      as a group.
    - Tasks handed out are copies; mutating them does not touch the store.

    Mutations made through add/delete/edit/toggle_completion are recorded in
    `actions` before they are applied. remove/insert/replace are the raw
    structural primitives the undo log itself uses and are not recorded.
    """

    def __init__(self, tasks: Iterable[Task] | None = None, *, action_log: ActionLog | None = None) -> None:
        self.lock = threading.RLock()
        self.actions = action_log if action_log is not None else ActionLog()
        self._tasks: list[Task] = [t.snapshot() for t in (tasks or ())]
        self._renumber()
        logger.info("TaskStore ready total=%s undo_capacity=%s", len(self._tasks), self.actions.capacity)

    # ---- low-level helpers ----

    def _renumber(self) -> None:
        for i, task in enumerate(self._tasks):
            task.id = i + 1

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._tasks):
            raise IndexOutOfRange(index, len(self._tasks))

    def _record(self, kind: ActionKind, index: int, task: Task) -> None:
        self.actions.push(Action(kind=kind, snapshot=task.snapshot(), position=index))

    # ---- queries ----

    def __len__(self) -> int:
        with self.lock:
            return len(self._tasks)

    def current_tasks(self) -> list[Task]:
        """Ordered copies of all tasks."""
        with self.lock:
            return [t.snapshot() for t in self._tasks]

    snapshot = current_tasks

    def get(self, index: int) -> Task:
        with self.lock:
            self._check_index(index)
            return self._tasks[index].snapshot()

    def search(self, query: str) -> int | None:
        """
        Index of the first task whose title contains `query` (case-sensitive).

        An empty query matches every title, so it selects the first task.
        """
        with self.lock:
            for i, task in enumerate(self._tasks):
                if query in task.title:
                    return i
            return None

    # ---- mutations ----

    def add(
        self,
        title: str,
        category: str,
        due_date: str = "",
        recurrence: Recurrence | str = Recurrence.NONE,
        priority: int | str = 3,
    ) -> Task:
        """
        Validate and append a new task.

        Fields are checked in order title, category, due_date, recurrence,
        priority; the first failure raises ValidationError for that field.
        """
        clean_title = _clean_text(title, "title", MAX_TITLE_LEN)
        clean_category = _clean_text(category, "category", MAX_CATEGORY_LEN)
        clean_due = _clean_due_date(due_date)
        clean_rec = _clean_recurrence(recurrence)
        clean_prio = _clean_priority(priority)

        with self.lock:
            task = Task(
                id=len(self._tasks) + 1,
                title=clean_title,
                category=clean_category,
                due_date=clean_due,
                recurrence=clean_rec,
                priority=clean_prio,
                completed=False,
            )
            try:
                self._tasks.append(task)
            except MemoryError as e:
                raise AllocationFailure() from e

            index = len(self._tasks) - 1
            self._record(ActionKind.ADD, index, task)
            logger.info("Task added. id=%s title=%r due=%s rec=%s", task.id, task.title, task.due_date, task.recurrence.value)
            return task.snapshot()

    def remove(self, index: int) -> Task:
        """Remove the task at `index` and close the gap. Not recorded for undo."""
        with self.lock:
            self._check_index(index)
            removed = self._tasks.pop(index)
            self._renumber()
            return removed

    def delete(self, index: int) -> Task:
        """Record a DELETE action for the task at `index`, then remove it."""
        with self.lock:
            self._check_index(index)
            self._record(ActionKind.DELETE, index, self._tasks[index])
            removed = self.remove(index)
            logger.info("Task deleted. index=%s title=%r", index, removed.title)
            return removed

    def insert(self, index: int, task: Task) -> None:
        """Insert a copy of `task` at `index` (0..len), shifting later tasks right."""
        with self.lock:
            if not 0 <= index <= len(self._tasks):
                raise IndexOutOfRange(index, len(self._tasks))
            try:
                self._tasks.insert(index, task.snapshot())
            except MemoryError as e:
                raise AllocationFailure() from e
            self._renumber()

    def replace(self, index: int, task: Task) -> None:
        """Overwrite the task at `index` wholesale with a copy of `task`."""
        with self.lock:
            self._check_index(index)
            self._tasks[index] = task.snapshot()
            self._renumber()

    def edit(
        self,
        index: int,
        *,
        title: Any = UNCHANGED,
        category: Any = UNCHANGED,
        due_date: Any = UNCHANGED,
        recurrence: Any = UNCHANGED,
        priority: Any = UNCHANGED,
    ) -> Task:
        """
        Change any subset of fields of the task at `index`.

        Every supplied field is validated before anything is written, so a
        ValidationError leaves the task untouched. An empty due_date clears
        the date. Id and position never change.
        """
        changes: dict[str, Any] = {}
        if title is not UNCHANGED:
            changes["title"] = _clean_text(title, "title", MAX_TITLE_LEN)
        if category is not UNCHANGED:
            changes["category"] = _clean_text(category, "category", MAX_CATEGORY_LEN)
        if due_date is not UNCHANGED:
            changes["due_date"] = _clean_due_date(due_date)
        if recurrence is not UNCHANGED:
            changes["recurrence"] = _clean_recurrence(recurrence)
        if priority is not UNCHANGED:
            changes["priority"] = _clean_priority(priority)

        with self.lock:
            self._check_index(index)
            task = self._tasks[index]
            self._record(ActionKind.EDIT, index, task)
            for name, value in changes.items():
                setattr(task, name, value)
            logger.info("Task edited. id=%s fields=%s", task.id, sorted(changes) or "-")
            return task.snapshot()

    def toggle_completion(self, index: int) -> Task:
        """
        Flip `completed`.

        Completing a recurring task rolls its due date forward one period.
        Un-completing leaves the date where it is.
        """
        with self.lock:
            self._check_index(index)
            task = self._tasks[index]
            self._record(ActionKind.COMPLETE, index, task)

            task.completed = not task.completed
            if task.completed and task.recurrence != Recurrence.NONE:
                old_due = task.due_date
                task.due_date = date_rules.advance_text(task.due_date, task.recurrence)
                logger.debug("Recurring task id=%s rolled %s -> %s", task.id, old_due, task.due_date)

            logger.info("Task completion status toggled. id=%s completed=%s", task.id, task.completed)
            return task.snapshot()

    def sort(self, key: SortKey | str, ascending: bool = True) -> None:
        """
        Stable sort of the whole collection; the result becomes the new order.

        Due-date ordering compares the YYYY-MM-DD text and always puts tasks
        without a date last, whatever the direction.
        """
        sort_key = SortKey(key)
        with self.lock:
            if sort_key == SortKey.PRIORITY:
                self._tasks.sort(key=lambda t: t.priority, reverse=not ascending)
            else:
                dated = [t for t in self._tasks if t.has_due_date]
                undated = [t for t in self._tasks if not t.has_due_date]
                dated.sort(key=lambda t: t.due_date, reverse=not ascending)
                self._tasks = dated + undated
            self._renumber()
            logger.info("Tasks sorted by %s (%s).", sort_key.value, "asc" if ascending else "desc")

    def undo(self) -> Action:
        """Invert the most recent recorded mutation (see ActionLog.pop_and_invert)."""
        with self.lock:
            return self.actions.pop_and_invert(self)
