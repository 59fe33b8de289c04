# src/todo_tracker/cli/render.py

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from ..tasks import date_rules
from ..tasks.task_models import Task

RESET = "\033[0m"
REVERSE = "\033[7m"
RED = "\033[31m"
YELLOW = "\033[33m"

PRIORITY_COLORS = {
    1: "\033[32m",  # green
    2: "\033[34m",  # blue
    3: "\033[36m",  # cyan
    4: "\033[35m",  # magenta
    5: "\033[37m",  # white
}

HEADER = "ID  Title               Category        Priority  Due Date    Recurrence  Status"
EMPTY_TEXT = "No tasks to display. Press 'a' to add a new task."


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "~"


def format_row(task: Task) -> str:
    status = "Done" if task.completed else "Pending"
    return (
        f"{task.id:<3d} {_clip(task.title, 18):<18s} {_clip(task.category, 15):<15s} "
        f"{task.priority:<9d} {task.due_date:<11s} {task.recurrence.value:<11s} {status:<8s}"
    )


def row_color(task: Task, today: date | None = None) -> str:
    if date_rules.is_overdue(task, today):
        return RED
    if date_rules.is_due_soon(task, today):
        return YELLOW
    return PRIORITY_COLORS.get(task.priority, "")


def render_tasks(
    tasks: Sequence[Task],
    selected: int,
    *,
    color: bool = True,
    today: date | None = None,
) -> list[str]:
    """Table lines for the task list; the selected row is marked with '>' (and reversed when coloured)."""
    if not tasks:
        return [EMPTY_TEXT]

    lines = [f" {HEADER}", "-" * (len(HEADER) + 1)]
    for i, task in enumerate(tasks):
        marker = ">" if i == selected else " "
        row = f"{marker}{format_row(task)}"
        if color:
            style = row_color(task, today) + (REVERSE if i == selected else "")
            row = f"{style}{row}{RESET}"
        lines.append(row)
    return lines
