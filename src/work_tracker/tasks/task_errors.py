# src/work_tracker/tasks/task_errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for task store failures. The collection is left unchanged."""


class ValidationError(TaskError, ValueError):
    """Rejected input (e.g. an empty task name)."""


class TaskNotFound(TaskError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class SessionIndexError(TaskError, IndexError):
    def __init__(self, task_id: str, index: int, count: int) -> None:
        super().__init__(f"Task {task_id} has no session #{index} ({count} recorded)")
        self.task_id = task_id
        self.index = index
        self.count = count


class PersistenceReadError(TaskError):
    """Saved snapshot could not be parsed; callers recover by starting empty."""


class ActivityNotFound(TaskError, LookupError):
    def __init__(self, task_id: str, activity_id: str) -> None:
        super().__init__(f"Task {task_id} has no activity {activity_id}")
        self.task_id = task_id
        self.activity_id = activity_id
