# src/work_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values match the keys used by saved snapshots and exports.
    """

    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


@dataclass(slots=True, frozen=True)
class Session:
    """Closed interval [start, end] in epoch milliseconds."""

    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Session:
        return cls(start=int(raw["start"]), end=int(raw["end"]))


@dataclass(slots=True, frozen=True)
class Activity:
    """Free-text log entry attached to a task; not part of time accounting."""

    id: str
    text: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Activity:
        return cls(
            id=str(raw["id"]),
            text=str(raw.get("text") or ""),
            timestamp=int(raw.get("timestamp") or 0),
        )


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    name: str
    description: str
    status: TaskStatus
    assigned_date: str  # YYYY-MM-DD

    # Seconds credited from closed sessions (authoritative accumulator).
    base_active_time: int = 0
    # Mirrors base_active_time whenever the timer is not running.
    active_time: int = 0
    # Display-only: seconds in the open session, 0 while idle.
    current_session_time: int = 0

    sessions: tuple[Session, ...] = ()
    is_timer_active: bool = False
    timer_start_time: int | None = None

    activities: tuple[Activity, ...] = ()
    priority: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority,
            "status": self.status.value,
            "assignedDate": self.assigned_date,
            "activeTime": self.active_time,
            "baseActiveTime": self.base_active_time,
            "currentSessionTime": self.current_session_time,
            "sessions": [s.to_dict() for s in self.sessions],
            "activities": [a.to_dict() for a in self.activities],
            "isTimerActive": self.is_timer_active,
            "timerStartTime": self.timer_start_time,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Build a Task from its snapshot dict.

        Raises KeyError/TypeError/ValueError on records that are not usable.
        """
        start_raw = raw.get("timerStartTime")
        timer_start = int(start_raw) if start_raw is not None else None
        is_active = bool(raw.get("isTimerActive")) and timer_start is not None
        base = int(raw.get("baseActiveTime") or 0)
        active = raw.get("activeTime")
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            description=str(raw.get("description") or ""),
            priority=str(raw.get("priority") or ""),
            status=TaskStatus.from_raw(raw.get("status")),
            assigned_date=str(raw.get("assignedDate") or ""),
            active_time=base if active is None else int(active),
            base_active_time=base,
            current_session_time=int(raw.get("currentSessionTime") or 0) if is_active else 0,
            sessions=tuple(Session.from_dict(s) for s in raw.get("sessions") or []),
            activities=tuple(Activity.from_dict(a) for a in raw.get("activities") or []),
            is_timer_active=is_active,
            timer_start_time=timer_start if is_active else None,
        )


@dataclass(slots=True, frozen=True)
class TaskSections:
    """Tasks grouped the way the board shows them."""

    pending: tuple[Task, ...] = ()
    in_progress: tuple[Task, ...] = ()
    completed: tuple[Task, ...] = ()
