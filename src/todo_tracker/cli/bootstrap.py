# src/todo_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the per-user data directory exists,
- loads the task file and wires TaskStore/ActionLog/PersistenceEngine into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.errors import StorageUnavailable
from ..core.state import AppState
from ..tasks.action_log import ActionLog
from ..tasks.persistence import PersistenceEngine
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> str | None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Could not create data directory %s: %s", settings.data_dir, e)
        return StorageUnavailable(settings.data_dir, e.strerror or str(e)).message
    return None


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Storage problems never abort startup: the app keeps running in memory
    and the reason is left on the status line.
    """
    if settings is None:
        settings = get_settings()

    problem = _ensure_local_dirs(settings)

    persistence = PersistenceEngine(settings.tasks_path)

    tasks: list[Task] = []
    first_run = not settings.tasks_path.exists()
    if problem is None:
        try:
            tasks = persistence.load()
        except StorageUnavailable as e:
            problem = e.message

    store = TaskStore(tasks, action_log=ActionLog(getattr(settings, "undo_capacity", 100)))
    state = AppState(settings=settings, store=store, persistence=persistence)

    # Called from the save worker thread; the console loop shows it before the next render.
    persistence.on_error = state.post_background

    if problem is not None:
        # Never overwrite a file we could not read.
        persistence.disable(problem)
        state.notify(problem, level=logging.WARNING)
    elif first_run:
        state.notify("Tasks file not found. Starting with an empty task list.")

    return state
