# src/work_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the clock, the snapshot store and the task store into AppState,
- loads the saved snapshot.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Clock
from ..core.state import AppState
from ..storage.snapshot_store import BackgroundSnapshotWriter, JsonSnapshotStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, clock: Clock | None = None, background_saves: bool = True) -> AppState:
    """
    Create AppState from the provided settings and load saved tasks.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    repo = JsonSnapshotStore(settings.snapshot_path)
    snapshot_repo = BackgroundSnapshotWriter(repo) if background_saves else repo

    store = TaskStore(clock=clock or SystemClock(), repo=snapshot_repo)
    store.load_from_repo()

    return AppState(settings=settings, task_store=store, snapshot_repo=snapshot_repo)


def shutdown_state(state: AppState) -> None:
    """Flush queued snapshot writes (best-effort)."""
    close = getattr(state.snapshot_repo, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception:
        logger.exception("Failed to flush snapshot writes.")
