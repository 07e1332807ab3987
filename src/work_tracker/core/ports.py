# src/work_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store depends on Protocols instead of concrete implementations.
This keeps the clock and the snapshot storage swappable and makes testing easier.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class Clock(Protocol):
    """Time source. Instants are integer epoch milliseconds."""

    def now_ms(self) -> int: ...


class SnapshotRepo(Protocol):
    """
    Persistence port for the whole task collection.

    load() is called once at startup; save() after every mutation.
    Implementations must not raise from save(): failures are logged there.
    """

    def load(self) -> tuple[Task, ...]: ...

    def save(self, tasks: Sequence[Task]) -> None: ...
