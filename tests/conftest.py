# tests/conftest.py

from __future__ import annotations

from itertools import count
from pathlib import Path
from types import SimpleNamespace

import pytest

from work_tracker.core.state import AppState
from work_tracker.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeSnapshotRepo


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo() -> FakeSnapshotRepo:
    return FakeSnapshotRepo()


@pytest.fixture()
def store(clock: FakeClock, repo: FakeSnapshotRepo) -> TaskStore:
    """TaskStore with a fake clock, in-memory repo and predictable ids (t1, t2, ...)."""
    ids = count(1)
    return TaskStore(
        clock=clock,
        repo=repo,
        today=lambda: "2024-05-01",
        id_factory=lambda: f"t{next(ids)}",
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="work-tracker-test",
        log_level="DEBUG",
        ticker_enabled=False,
        tick_interval_seconds=0.01,
        data_dir=tmp_path,
        snapshot_path=tmp_path / "tasks.json",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, repo: FakeSnapshotRepo) -> AppState:
    return AppState(settings=settings, task_store=store, snapshot_repo=repo)
