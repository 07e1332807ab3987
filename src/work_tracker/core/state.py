# src/work_tracker/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in with the same attributes).
    settings: Any

    task_store: TaskStore
    snapshot_repo: Any = None

    # Serializes console commands; the store has its own lock for the ticker.
    lock: threading.RLock = field(default_factory=threading.RLock)
