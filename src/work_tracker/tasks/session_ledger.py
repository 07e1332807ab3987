# src/work_tracker/tasks/session_ledger.py

"""
Session ledger: pure arithmetic over closed sessions.

All instants are epoch milliseconds, all durations whole seconds (floored).
Nothing here touches the clock or the store.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .task_errors import SessionIndexError
from .task_models import Session, Task

MS_PER_SECOND = 1000


def elapsed_seconds(start_ms: int, now_ms: int) -> int:
    """Whole seconds between two instants; never negative."""
    return max(0, (now_ms - start_ms) // MS_PER_SECOND)


def session_duration(session: Session) -> int:
    return elapsed_seconds(session.start, session.end)


def total_duration(sessions: Iterable[Session]) -> int:
    return sum(session_duration(s) for s in sessions)


def close(
    start_ms: int, now_ms: int, *, keep_partial: bool = False
) -> tuple[int, Session | None]:
    """
    Close an open interval.

    Returns (duration_seconds, session). The session ends at
    start + duration seconds, not at now, so the recorded span always matches
    the credited seconds.

    A duration under one second yields no session, unless keep_partial is set
    (complete/reopen): then a non-empty sub-second interval is still recorded
    as [start, now], credited with 0 seconds.
    """
    duration = elapsed_seconds(start_ms, now_ms)
    if duration >= 1:
        return duration, Session(start=start_ms, end=start_ms + duration * MS_PER_SECOND)
    if keep_partial and now_ms > start_ms:
        return 0, Session(start=start_ms, end=now_ms)
    return 0, None


def append_session(task: Task, session: Session) -> Task:
    """Record a closed session and credit its seconds to both accumulators."""
    duration = session_duration(session)
    return replace(
        task,
        sessions=(*task.sessions, session),
        base_active_time=task.base_active_time + duration,
        active_time=task.active_time + duration,
    )


def remove_session(task: Task, index: int) -> Task:
    """
    Drop sessions[index] and subtract its seconds from both accumulators.

    Negative indexes are rejected: positions are the ones shown to the user.
    """
    count = len(task.sessions)
    if index < 0 or index >= count:
        raise SessionIndexError(task.id, index, count)

    duration = session_duration(task.sessions[index])
    return replace(
        task,
        sessions=task.sessions[:index] + task.sessions[index + 1 :],
        active_time=task.active_time - duration,
        base_active_time=task.base_active_time - duration,
    )
