# src/todo_tracker/tasks/action_log.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from ..core.errors import NothingToUndo
from .task_models import Task

if TYPE_CHECKING:
    from .task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class ActionKind(StrEnum):
    ADD = "add"
    DELETE = "delete"
    EDIT = "edit"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class Action:
    """
    Inverse record for one mutation.

    `snapshot` is the full task value before the mutation (after it, for ADD),
    `position` the index the mutation touched.
    """

    kind: ActionKind
    snapshot: Task
    position: int


class ActionLog:
    """
    Bounded LIFO undo log.

    Once `capacity` entries are held, further pushes are dropped: existing
    entries are never evicted, so the oldest recorded actions stay undoable.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = max(0, int(capacity))
        self._stack: list[Action] = []

    def __len__(self) -> int:
        return len(self._stack)

    def is_full(self) -> bool:
        return len(self._stack) >= self.capacity

    def push(self, action: Action) -> None:
        if self.is_full():
            logger.debug("Undo log full (capacity=%s); dropping %s action.", self.capacity, action.kind.value)
            return
        self._stack.append(Action(action.kind, action.snapshot.snapshot(), action.position))

    def pop_and_invert(self, store: TaskStore) -> Action:
        """
        Pop the most recent action and apply its inverse to `store`.

        Returns the undone action. The action is consumed even when its
        position no longer exists in the store (IndexOutOfRange propagates).
        """
        if not self._stack:
            raise NothingToUndo()

        action = self._stack.pop()

        if action.kind == ActionKind.ADD:
            store.remove(action.position)
        elif action.kind == ActionKind.DELETE:
            store.insert(action.position, action.snapshot)
        else:
            # EDIT and COMPLETE restore the whole task, including any date roll.
            store.replace(action.position, action.snapshot)

        logger.info("Undo last action (%s at %s).", action.kind.value, action.position)
        return action
