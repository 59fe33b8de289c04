# tests/test_persistence.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_tracker.core.errors import StorageUnavailable
from todo_tracker.tasks.persistence import PersistenceEngine, format_record, parse_record
from todo_tracker.tasks.task_models import NO_DUE_DATE, Recurrence, Task
from todo_tracker.tasks.task_store import TaskStore


def _sample_tasks() -> list[Task]:
    store = TaskStore()
    store.add("Buy milk", "home", "2024-03-01", "none", 3)
    store.add("Report Q1", "work", "", "weekly", 1)
    store.add("Renew passport", "admin", "2025-12-31", "yearly", 5)
    store.toggle_completion(1)
    return store.snapshot()


def test_record_layout() -> None:
    task = Task(
        id=2,
        title="Report Q1",
        category="work",
        due_date="2024-01-08",
        recurrence=Recurrence.BIWEEKLY,
        priority=1,
        completed=True,
    )
    assert format_record(task) == "2\tReport Q1\twork\t1\t1\t2024-01-08\tbiweekly"
    assert parse_record(format_record(task) + "\n") == task


def test_save_then_load_round_trip(tmp_path: Path) -> None:
    engine = PersistenceEngine(tmp_path / "tasks.txt")
    tasks = _sample_tasks()

    engine.save(tasks)
    assert engine.load() == tasks


def test_save_rewrites_whole_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    engine = PersistenceEngine(path)
    engine.save(_sample_tasks())
    engine.save([Task(id=1, title="only", category="c")])

    assert path.read_text("utf-8") == f"1\tonly\tc\t3\t0\t{NO_DUE_DATE}\tnone\n"
    assert not (tmp_path / "tasks.txt.tmp").exists()


def test_missing_file_is_empty_collection(tmp_path: Path) -> None:
    engine = PersistenceEngine(tmp_path / "nope" / "tasks.txt")
    assert engine.load() == []


def test_malformed_lines_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text(
        "\n".join(
            [
                "1\tGood one\thome\t2\t0\tN/A\tnone",
                "2\tsix fields\thome\t2\t0\tN/A",
                "3\tbad prio\thome\thigh\t0\tN/A\tnone",
                "4\tbad rec\thome\t2\t0\tN/A\thourly",
                "5\t\thome\t2\t0\tN/A\tnone",
                "",
                "6\tprio range\thome\t9\t0\tN/A\tnone",
                "x\tbad id\thome\t2\t0\tN/A\tnone",
                "7\tGood two\twork\t5\t1\t2024-01-01\tdaily",
                "8\ttab\tin title\twork\t5\t1\t2024-01-01\tdaily",
            ]
        )
        + "\n",
        "utf-8",
    )

    tasks = PersistenceEngine(path).load()
    assert [t.title for t in tasks] == ["Good one", "Good two"]
    assert tasks[1].completed is True
    assert tasks[1].recurrence is Recurrence.DAILY


def test_load_unreadable_path_raises_storage_unavailable(tmp_path: Path) -> None:
    as_dir = tmp_path / "tasks.txt"
    as_dir.mkdir()
    with pytest.raises(StorageUnavailable):
        PersistenceEngine(as_dir).load()


def test_save_into_unusable_dir_raises_storage_unavailable(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", "utf-8")
    engine = PersistenceEngine(blocker / "tasks.txt")
    with pytest.raises(StorageUnavailable) as exc:
        engine.save(_sample_tasks())
    assert "Working in memory only" in exc.value.message


def test_save_async_writes_in_trigger_order(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    engine = PersistenceEngine(path)
    try:
        for n in range(1, 21):
            engine.save_async([Task(id=i + 1, title=f"t{i}", category="c") for i in range(n)])
        engine.flush()
    finally:
        engine.shutdown()

    assert len(engine.load()) == 20
    assert engine.last_error is None


def test_save_async_uses_snapshot_taken_at_trigger(tmp_path: Path) -> None:
    store = TaskStore()
    store.add("before", "c")
    engine = PersistenceEngine(tmp_path / "tasks.txt")
    tasks = store.snapshot()
    engine.save_async(tasks)
    tasks[0].title = "mutated after trigger"
    engine.shutdown()

    assert [t.title for t in engine.load()] == ["before"]


def test_background_failure_is_reported_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", "utf-8")
    seen: list[str] = []
    engine = PersistenceEngine(blocker / "tasks.txt", on_error=seen.append)

    engine.save_async(_sample_tasks())
    engine.flush()
    engine.shutdown()

    assert len(seen) == 1
    assert "Storage unavailable" in seen[0]
    assert engine.last_error == seen[0]


def test_save_async_after_shutdown_still_writes(tmp_path: Path) -> None:
    engine = PersistenceEngine(tmp_path / "tasks.txt")
    engine.shutdown()
    engine.save_async(_sample_tasks())
    assert len(engine.load()) == 3


def test_invalid_utf8_line_is_skipped_and_never_rewritten(tmp_path: Path, caplog) -> None:
    path = tmp_path / "tasks.txt"
    path.write_bytes(b"1\tCaf\xe9\thome\t2\t0\tN/A\tnone\n2\tGood\twork\t3\t0\tN/A\tnone\n")
    engine = PersistenceEngine(path)

    with caplog.at_level("WARNING", logger="todo_tracker.tasks.persistence"):
        tasks = engine.load()

    assert [t.title for t in tasks] == ["Good"]
    assert any("Skipping malformed record" in r.getMessage() and ":1" in r.getMessage() for r in caplog.records)

    engine.save(tasks)
    data = path.read_bytes()
    assert "\ufffd".encode() not in data
    assert data == b"1\tGood\twork\t3\t0\tN/A\tnone\n"


def test_disabled_engine_leaves_file_untouched(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    original = b"1\tKeep me\thome\t2\t0\tN/A\tnone\n"
    path.write_bytes(original)
    engine = PersistenceEngine(path)
    engine.disable("unreadable")

    engine.save([Task(id=1, title="other", category="c")])
    engine.save_async([Task(id=1, title="other", category="c")])
    engine.flush()
    engine.shutdown()

    assert engine.disabled
    assert path.read_bytes() == original
    assert not (tmp_path / "tasks.txt.tmp").exists()
