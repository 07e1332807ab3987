# tests/test_task_api.py

from __future__ import annotations

import pytest

from work_tracker.tasks.task_api import format_duration, group_by_status, resolve_task
from work_tracker.tasks.task_models import Task, TaskStatus


def _t(task_id: str, status: TaskStatus, running: bool = False) -> Task:
    return Task(
        id=task_id,
        name=task_id.upper(),
        description="",
        status=status,
        assigned_date="2024-05-01",
        is_timer_active=running,
        timer_start_time=1 if running else None,
    )


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0s"), (59, "59s"), (60, "1m"), (3599, "59m"), (3600, "1h 0m"), (3 * 3600 + 125, "3h 2m")],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_group_by_status_puts_running_task_first() -> None:
    tasks = [
        _t("p1", TaskStatus.PENDING),
        _t("i1", TaskStatus.IN_PROGRESS),
        _t("c1", TaskStatus.COMPLETED),
        _t("i2", TaskStatus.IN_PROGRESS, running=True),
        _t("i3", TaskStatus.IN_PROGRESS),
    ]
    sections = group_by_status(tasks)

    assert [t.id for t in sections.pending] == ["p1"]
    assert [t.id for t in sections.in_progress] == ["i2", "i1", "i3"]
    assert [t.id for t in sections.completed] == ["c1"]


def test_resolve_task_by_position_and_prefix() -> None:
    tasks = [_t("abc1", TaskStatus.PENDING), _t("abd2", TaskStatus.PENDING)]

    assert resolve_task(tasks, "2").id == "abd2"
    assert resolve_task(tasks, "abc").id == "abc1"
    assert resolve_task(tasks, "ab") is None
    assert resolve_task(tasks, "3") is None
    assert resolve_task(tasks, "") is None


def test_resolve_task_falls_back_to_numeric_id() -> None:
    tasks = [_t("1712345678901", TaskStatus.PENDING), _t("1712345679999", TaskStatus.PENDING)]

    assert resolve_task(tasks, "1712345678901").id == "1712345678901"
    assert resolve_task(tasks, "17123456789").id == "1712345678901"
    assert resolve_task(tasks, "2").id == "1712345679999"
    assert resolve_task(tasks, "1712") is None
