# src/work_tracker/tasks/task_export.py

"""Read-only export projections of the task collection (JSON backup, CSV table)."""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .task_models import Session, Task, TaskStatus

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Task Name",
    "Description",
    "Status",
    "Assigned Date",
    "Total Time (minutes)",
    "Number of Sessions",
    "Activities",
    "Sessions Details",
]


def _ms_to_local(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _session_detail(number: int, session: Session) -> str:
    minutes = (session.end - session.start) / 1000 / 60
    return (
        f"Session {number}: {_ms_to_local(session.start)} to "
        f"{_ms_to_local(session.end)} ({minutes:.2f} min)"
    )


def build_json_export(tasks: Sequence[Task], now: datetime | None = None) -> dict[str, Any]:
    """Full snapshot: every task plus counts by status."""
    now = now or datetime.now(timezone.utc)
    by_status = {s: sum(1 for t in tasks if t.status == s) for s in TaskStatus}
    return {
        "exportDate": now.isoformat(),
        "tasks": [t.to_dict() for t in tasks],
        "metadata": {
            "totalTasks": len(tasks),
            "pendingTasks": by_status[TaskStatus.PENDING],
            "inProgressTasks": by_status[TaskStatus.IN_PROGRESS],
            "completedTasks": by_status[TaskStatus.COMPLETED],
        },
    }


def csv_row(task: Task) -> list[str]:
    return [
        task.name,
        task.description,
        task.status.value,
        task.assigned_date,
        f"{task.active_time / 60:.2f}",
        str(len(task.sessions)),
        "; ".join(a.text for a in task.activities),
        "; ".join(_session_detail(i, s) for i, s in enumerate(task.sessions, start=1)),
    ]


def build_csv_export(tasks: Sequence[Task]) -> str:
    """One row per task; quoting is left to the csv module."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for task in tasks:
        writer.writerow(csv_row(task))
    return buf.getvalue()


def write_export(
    tasks: Sequence[Task],
    export_dir: str | Path,
    *,
    fmt: str = "json",
    now: datetime | None = None,
) -> Path:
    """
    Write an export file named after today's date and return its path.

    fmt: "json" (full backup) or "csv" (spreadsheet table).
    """
    now = now or datetime.now(timezone.utc)
    day = now.date().isoformat()
    out_dir = Path(export_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    fmt = (fmt or "json").strip().lower()
    if fmt == "json":
        path = out_dir / f"work-tracker-backup-{day}.json"
        payload = json.dumps(build_json_export(tasks, now), ensure_ascii=False, indent=2)
    elif fmt == "csv":
        path = out_dir / f"work-tracker-{day}.csv"
        payload = build_csv_export(tasks)
    else:
        raise ValueError(f"Unknown export format: {fmt!r} (use json or csv)")

    path.write_text(payload, "utf-8")
    logger.info("Exported %d tasks to %s", len(tasks), path)
    return path
