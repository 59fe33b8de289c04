# src/todo_tracker/tasks/persistence.py

"""
Flat-file persistence for the task collection.

Record format (UTF-8, one task per line, tab separated, no escaping):

    id  title  category  priority  completed  due_date  recurrence

`completed` is 0/1 and `recurrence` one of the Recurrence tokens. A tab or
newline inside a title/category corrupts that record on reload; such lines
are skipped like any other malformed line, as are lines that are not valid
UTF-8.

Saving always rewrites the whole file (temp file + os.replace).
Background saves go through one worker thread, so they land on disk in the
order they were triggered.

Once disabled (the file could not be read, or its directory could not be
created) the engine is memory-only: saves are skipped and the file on disk
is left untouched.
"""

from __future__ import annotations

import contextlib
import logging
import os
import queue
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from ..core.errors import StorageUnavailable
from .task_models import MAX_PRIORITY, MIN_PRIORITY, Recurrence, Task

logger = logging.getLogger(__name__)

FIELD_SEP = "\t"
N_FIELDS = 7

ErrorCallback = Callable[[str], None]


def format_record(task: Task) -> str:
    return FIELD_SEP.join(
        (
            str(task.id),
            task.title,
            task.category,
            str(task.priority),
            "1" if task.completed else "0",
            task.due_date,
            task.recurrence.value,
        )
    )


def parse_record(line: str) -> Task | None:
    """Parse one record line; None if it is not exactly a valid seven-field record."""
    parts = line.rstrip("\r\n").split(FIELD_SEP)
    if len(parts) != N_FIELDS:
        return None

    raw_id, title, category, raw_prio, raw_done, due_date, raw_rec = parts
    if not title or not category or not due_date or " " in due_date:
        return None

    try:
        task_id = int(raw_id)
        priority = int(raw_prio)
        completed = int(raw_done)
    except ValueError:
        return None

    recurrence = Recurrence.from_name(raw_rec.strip())
    if recurrence is None or not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        return None

    return Task(
        id=task_id,
        title=title,
        category=category,
        due_date=due_date,
        recurrence=recurrence,
        priority=priority,
        completed=completed != 0,
    )


class PersistenceEngine:
    """
    Reads/writes the record file and owns the background save worker.

    The worker thread is started lazily on the first save_async() call.
    Errors in background writes never reach the caller: they are logged and
    passed to `on_error` (the shell's status channel).
    """

    def __init__(self, path: str | Path, *, on_error: ErrorCallback | None = None) -> None:
        self.path = Path(path)
        self.on_error = on_error
        self.last_error: str | None = None
        self.disabled_reason: str | None = None

        self._queue: queue.Queue[list[Task] | None] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._worker_lock = threading.Lock()
        self._stop_requested = False

    @property
    def disabled(self) -> bool:
        return self.disabled_reason is not None

    def disable(self, reason: str) -> None:
        """Switch to memory-only: every later save is skipped."""
        self.disabled_reason = reason
        logger.warning("Persistence disabled for %s: %s", self.path, reason)

    # ---- synchronous API ----

    def load(self) -> list[Task]:
        """
        Read all valid records. A missing file is a first run (empty list);
        any other OS error raises StorageUnavailable.
        """
        if not self.path.exists():
            logger.info("Tasks file not found (%s). Starting with an empty task list.", self.path)
            return []

        tasks: list[Task] = []
        skipped = 0
        try:
            with self.path.open("rb") as fh:
                for lineno, raw in enumerate(fh, start=1):
                    try:
                        line = raw.decode("utf-8")
                    except UnicodeDecodeError:
                        task = None
                    else:
                        if not line.strip():
                            continue
                        task = parse_record(line)
                    if task is None:
                        skipped += 1
                        logger.warning("Skipping malformed record %s:%s", self.path, lineno)
                        continue
                    tasks.append(task)
        except OSError as e:
            logger.error("Failed to read tasks from %s: %s", self.path, e)
            raise StorageUnavailable(self.path, e.strerror or str(e)) from e

        logger.info("Loaded %d tasks from %s (skipped=%d)", len(tasks), self.path, skipped)
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        """Rewrite the record file with `tasks` in order (no-op while disabled)."""
        if self.disabled:
            logger.warning("Save skipped, working in memory only: %s", self.disabled_reason)
            return
        lines = [format_record(t) + "\n" for t in tasks]
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8", newline="\n") as fh:
                fh.writelines(lines)
            os.replace(tmp, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageUnavailable(self.path, e.strerror or str(e)) from e

        logger.info("Saved %d tasks to %s", len(lines), self.path)

    # ---- background API ----

    def save_async(self, tasks: Iterable[Task]) -> None:
        """
        Queue an owned copy of `tasks` for writing and return immediately.

        Callers holding a TaskStore should pass store.snapshot(), which copies
        under the store lock; the write itself happens without it.
        """
        if self.disabled:
            logger.warning("Background save skipped, working in memory only: %s", self.disabled_reason)
            return
        snapshot = [t.snapshot() for t in tasks]
        if self._stop_requested:
            logger.warning("save_async after shutdown; writing synchronously.")
            self._write_reporting(snapshot)
            return
        self._ensure_worker()
        self._queue.put(snapshot)

    def flush(self) -> None:
        """Block until every queued save has been written (or failed)."""
        if self._worker is None:
            return
        self._queue.join()

    def shutdown(self) -> None:
        """Drain pending saves and stop the worker."""
        if self._stop_requested:
            return
        self._stop_requested = True
        if self._worker is None:
            return

        logger.debug("Stopping save worker...")
        self._queue.put(None)
        self._queue.join()
        self._worker.join(timeout=5.0)
        logger.debug("Save worker stopped.")

    # ---- worker ----

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run_worker, name="todo-save", daemon=True)
            self._worker.start()

    def _run_worker(self) -> None:
        logger.debug("Save worker thread started.")
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                self._write_reporting(item)
            finally:
                self._queue.task_done()

    def _write_reporting(self, tasks: list[Task]) -> None:
        try:
            self.save(tasks)
            self.last_error = None
        except StorageUnavailable as e:
            logger.error("Background save failed: %s", e.message)
            self._report(e.message)
        except Exception:
            logger.exception("Background save crashed.")
            self._report("Error: could not save tasks.")

    def _report(self, message: str) -> None:
        self.last_error = message
        if self.on_error is None:
            return
        try:
            self.on_error(message)
        except Exception:
            logger.debug("on_error callback failed.", exc_info=True)
