# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_tracker.cli.bootstrap import create_initial_state
from todo_tracker.core.state import AppState
from todo_tracker.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="todo-test",
        log_level="WARNING",
        data_dir=data_dir,
        tasks_path=data_dir / "tasks.txt",
        log_path=data_dir / "todo_app.log",
        autosave_every=5,
        undo_capacity=100,
        color_enabled=False,
    )


@pytest.fixture()
def state(settings: SimpleNamespace):
    """AppState wired with a real store and a real (tmp) persistence engine."""
    st: AppState = create_initial_state(settings=settings)
    yield st
    st.persistence.shutdown()


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def filled_store() -> TaskStore:
    s = TaskStore()
    s.add("Buy milk", "home", "2024-03-01", "none", 3)
    s.add("Report Q1", "work", "", "weekly", 1)
    s.add("Report Q2", "work", "2024-01-15", "monthly", 5)
    return s
