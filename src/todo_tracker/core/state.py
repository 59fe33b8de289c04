# src/todo_tracker/core/state.py

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field

from ..tasks.persistence import PersistenceEngine
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: TaskStore
    persistence: PersistenceEngine

    selected: int = 0
    status_line: str = ""

    # Successful mutations since the last autosave trigger.
    mutations_since_save: int = 0

    # Next direction for the P / S sort commands.
    priority_ascending: bool = True
    date_ascending: bool = True

    # Messages posted from other threads (the save worker); drained by the console loop.
    background_messages: queue.SimpleQueue[str] = field(default_factory=queue.SimpleQueue)

    def notify(self, message: str, *, level: int = logging.INFO) -> None:
        """User-visible one-line status; also written to the log. Main thread only."""
        self.status_line = message
        logger.log(level, "status: %s", message)

    def post_background(self, message: str) -> None:
        """Thread-safe: queue a status message for the main thread."""
        self.background_messages.put(message)

    def drain_background(self) -> None:
        """Show queued background messages; the latest one wins the status line."""
        while True:
            try:
                message = self.background_messages.get_nowait()
            except queue.Empty:
                return
            self.notify(message, level=logging.WARNING)

    def clamp_selection(self) -> None:
        count = len(self.store)
        if self.selected >= count:
            self.selected = count - 1
        if self.selected < 0:
            self.selected = 0

    def trigger_save(self) -> None:
        """Fire-and-forget save of the current collection."""
        self.persistence.save_async(self.store.snapshot())

    def note_mutation(self) -> None:
        self.mutations_since_save += 1
        every = int(getattr(self.settings, "autosave_every", 5))
        if self.mutations_since_save >= every:
            logger.debug("Autosave after %d mutations.", self.mutations_since_save)
            self.mutations_since_save = 0
            self.trigger_save()
