# src/work_tracker/tasks/task_api.py

from __future__ import annotations

from collections.abc import Sequence

from .task_models import Task, TaskSections, TaskStatus


def format_duration(seconds: int) -> str:
    """Compact duration: "1h 5m", "12m" or "40s"."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{secs}s"


def group_by_status(tasks: Sequence[Task]) -> TaskSections:
    """
    Split tasks into board sections, keeping collection order.

    The in-progress section lists the timing task first.
    """
    in_progress = [t for t in tasks if t.status == TaskStatus.IN_PROGRESS]
    in_progress.sort(key=lambda t: not t.is_timer_active)
    return TaskSections(
        pending=tuple(t for t in tasks if t.status == TaskStatus.PENDING),
        in_progress=tuple(in_progress),
        completed=tuple(t for t in tasks if t.status == TaskStatus.COMPLETED),
    )


def resolve_task(tasks: Sequence[Task], ref: str) -> Task | None:
    """
    Find a task by 1-based list position or by id prefix.

    A number that is a valid position wins; otherwise it is tried as an id
    prefix (imported snapshots use all-digit ids). Returns None when nothing
    (or more than one task) matches.
    """
    ref = (ref or "").strip()
    if not ref:
        return None
    if ref.isdigit() and 1 <= int(ref) <= len(tasks):
        return tasks[int(ref) - 1]
    matches = [t for t in tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None
