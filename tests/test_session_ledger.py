# tests/test_session_ledger.py

from __future__ import annotations

import pytest

from work_tracker.tasks import session_ledger
from work_tracker.tasks.task_errors import SessionIndexError
from work_tracker.tasks.task_models import Session, Task, TaskStatus

T0 = 1_700_000_000_000


def _task(*sessions: Session) -> Task:
    total = session_ledger.total_duration(sessions)
    return Task(
        id="a",
        name="A",
        description="",
        status=TaskStatus.IN_PROGRESS,
        assigned_date="2024-05-01",
        base_active_time=total,
        active_time=total,
        sessions=tuple(sessions),
    )


def test_close_floors_and_uses_computed_end() -> None:
    duration, session = session_ledger.close(T0, T0 + 65_999)
    assert duration == 65
    assert session == Session(start=T0, end=T0 + 65_000)


def test_close_discards_sub_second_interval() -> None:
    assert session_ledger.close(T0, T0 + 999) == (0, None)
    assert session_ledger.close(T0, T0) == (0, None)


def test_close_keep_partial_records_sub_second_interval() -> None:
    duration, session = session_ledger.close(T0, T0 + 400, keep_partial=True)
    assert duration == 0
    assert session == Session(start=T0, end=T0 + 400)

    # Nothing elapsed at all: there is no interval to record.
    assert session_ledger.close(T0, T0, keep_partial=True) == (0, None)


def test_close_never_goes_negative_on_clock_skew() -> None:
    assert session_ledger.close(T0, T0 - 5_000) == (0, None)


def test_remove_session_subtracts_its_duration() -> None:
    task = _task(Session(T0, T0 + 10_000), Session(T0 + 20_000, T0 + 50_500))
    assert task.active_time == 40

    updated = session_ledger.remove_session(task, 1)

    assert updated.sessions == (Session(T0, T0 + 10_000),)
    assert updated.active_time == 10
    assert updated.base_active_time == 10


@pytest.mark.parametrize("index", [-1, 2, 99])
def test_remove_session_rejects_bad_index(index: int) -> None:
    task = _task(Session(T0, T0 + 1_000), Session(T0 + 2_000, T0 + 3_000))
    with pytest.raises(SessionIndexError):
        session_ledger.remove_session(task, index)


def test_remove_then_append_restores_totals() -> None:
    removed = Session(T0 + 20_000, T0 + 27_000)
    task = _task(Session(T0, T0 + 10_000), removed)

    after_delete = session_ledger.remove_session(task, 1)
    restored = session_ledger.append_session(after_delete, removed)

    assert restored.active_time == task.active_time == 17
    assert restored.base_active_time == task.base_active_time
    assert restored.sessions == task.sessions
