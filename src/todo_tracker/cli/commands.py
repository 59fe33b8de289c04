# src/todo_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.errors import AllocationFailure, TodoError, ValidationError
from ..core.state import AppState
from ..tasks.task_models import NO_DUE_DATE, Recurrence, SortKey
from ..tasks.task_store import UNCHANGED, validate_field

Prompt = Callable[[str], str]
CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, Prompt, CommandEmitter], str | None]

logger = logging.getLogger(__name__)

CLEAR_DATE = "-"


class CommandRegistry:
    """Single-key command registry used by the console connector (a, d, e, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(self, key: str, handler: CommandHandler, help_text: str) -> None:
        # Keys are case-sensitive: 's' searches, 'S' sorts.
        self._handlers[key] = handler
        self._help[key] = help_text

    def keys(self) -> list[str]:
        return list(self._handlers)

    def handle(
        self,
        state: AppState,
        key: str,
        ask: Prompt,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Run the handler bound to `key`.

        Recoverable TodoErrors become the status line. Returns the status
        message (None if the command had nothing to report).
        """
        handler = self._handlers.get(key)
        if handler is None:
            logger.debug("Unknown key %r", key)
            state.notify("Unknown command. Press 'h' for help.")
            return state.status_line

        try:
            reply = handler(state, ask, emit or (lambda _text: None))
        except AllocationFailure:
            raise
        except TodoError as e:
            state.notify(e.message, level=logging.WARNING)
            return e.message
        finally:
            state.clamp_selection()

        if reply is not None:
            state.notify(reply)
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for key, help_text in self._help.items():
            lines.append(f"  '{key}' - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- input helpers ----


def ask_until_valid(ask: Prompt, emit: CommandEmitter, field: str, prompt: str, *, default: Any = None) -> Any:
    """
    Re-prompt a single field until it validates.

    Blank input returns `default` as-is when given (used for "keep current").
    """
    while True:
        raw = ask(prompt)
        if default is not None and raw.strip() == "":
            return default
        try:
            return validate_field(field, raw)
        except ValidationError as e:
            emit(f"{e.message} Please try again.")


# ---- handlers ----


def cmd_down(state: AppState, ask: Prompt, emit: CommandEmitter) -> str | None:
    if state.selected < len(state.store) - 1:
        state.selected += 1
    return None


def cmd_up(state: AppState, ask: Prompt, emit: CommandEmitter) -> str | None:
    if state.selected > 0:
        state.selected -= 1
    return None


def cmd_add(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    title = ask_until_valid(ask, emit, "title", "Enter task title (cannot be empty): ")
    category = ask_until_valid(ask, emit, "category", "Enter category (cannot be empty): ")
    due_date = ask_until_valid(
        ask, emit, "due_date", "Enter due date (YYYY-MM-DD) or leave blank for N/A: ", default=NO_DUE_DATE
    )
    recurrence = ask_until_valid(
        ask,
        emit,
        "recurrence",
        "Enter recurrence (none, daily, weekly, biweekly, monthly, yearly) [none]: ",
        default="none",
    )
    priority = ask_until_valid(ask, emit, "priority", "Enter priority (1-5): ")

    task = state.store.add(title, category, due_date, recurrence, priority)
    state.selected = task.id - 1
    state.note_mutation()
    return "Task added successfully!"


def cmd_delete(state: AppState, ask: Prompt, emit: CommandEmitter) -> str | None:
    if len(state.store) == 0:
        return "No tasks to delete."

    answer = ask("Are you sure you want to delete this task? (y/n): ").strip().lower()
    if answer not in ("y", "yes"):
        return None

    state.store.delete(state.selected)
    state.note_mutation()
    return "Task deleted."


def cmd_edit(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    if len(state.store) == 0:
        return "No tasks to edit."

    current = state.store.get(state.selected)
    emit(f"Editing task {current.id}: {current.title}")

    keep = "keep current"
    title = ask_until_valid(ask, emit, "title", f"Edit task title (blank to {keep}): ", default=UNCHANGED)
    category = ask_until_valid(ask, emit, "category", f"Edit category (blank to {keep}): ", default=UNCHANGED)

    while True:
        raw_due = ask(f"Edit due date (YYYY-MM-DD, '{CLEAR_DATE}' for none, blank to {keep}): ").strip()
        if raw_due == "":
            due_date = UNCHANGED
            break
        if raw_due == CLEAR_DATE:
            due_date = NO_DUE_DATE
            break
        try:
            due_date = validate_field("due_date", raw_due)
            break
        except ValidationError as e:
            emit(f"{e.message} Please try again.")

    recurrence = ask_until_valid(
        ask,
        emit,
        "recurrence",
        f"Edit recurrence (none, daily, weekly, biweekly, monthly, yearly, blank to {keep}): ",
        default=UNCHANGED,
    )
    priority = ask_until_valid(ask, emit, "priority", f"Edit priority (1-5, blank to {keep}): ", default=UNCHANGED)

    state.store.edit(
        state.selected,
        title=title,
        category=category,
        due_date=due_date,
        recurrence=recurrence,
        priority=priority,
    )
    state.note_mutation()
    return "Task edited successfully!"


def cmd_toggle(state: AppState, ask: Prompt, emit: CommandEmitter) -> str | None:
    if len(state.store) == 0:
        return None
    task = state.store.toggle_completion(state.selected)
    state.note_mutation()
    if task.completed and task.has_due_date and task.recurrence != Recurrence.NONE:
        return f"Task completed. Next due date: {task.due_date}."
    return "Task marked as done." if task.completed else "Task marked as pending."


def cmd_search(state: AppState, ask: Prompt, emit: CommandEmitter) -> str | None:
    query = ask("Enter event name to search: ")
    index = state.store.search(query)
    if index is None:
        return "Event not found."
    state.selected = index
    return None


def cmd_sort_priority(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    ascending = state.priority_ascending
    state.store.sort(SortKey.PRIORITY, ascending)
    state.priority_ascending = not ascending
    state.selected = 0
    return f"Sorted by priority ({'ascending' if ascending else 'descending'})."


def cmd_sort_date(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    ascending = state.date_ascending
    state.store.sort(SortKey.DUE_DATE, ascending)
    state.date_ascending = not ascending
    state.selected = 0
    return f"Sorted by due date ({'closest first' if ascending else 'latest first'})."


def cmd_undo(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    action = state.store.undo()
    return f"Last action undone ({action.kind.value})."


def cmd_help(state: AppState, ask: Prompt, emit: CommandEmitter) -> None:
    emit(registry.build_help() + "\n  'q' - Quit the application")
    ask("Press Enter to return.")
    return None


registry.register("j", cmd_down, "Move down")
registry.register("k", cmd_up, "Move up")
registry.register("a", cmd_add, "Add a new task")
registry.register("d", cmd_delete, "Delete the selected task")
registry.register("e", cmd_edit, "Edit the selected task")
registry.register("c", cmd_toggle, "Toggle completion status")
registry.register("s", cmd_search, "Search for a task")
registry.register("P", cmd_sort_priority, "Sort tasks by priority")
registry.register("S", cmd_sort_date, "Sort tasks by due date")
registry.register("u", cmd_undo, "Undo last action")
registry.register("h", cmd_help, "Show this help menu")
