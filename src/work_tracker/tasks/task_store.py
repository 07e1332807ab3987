# src/work_tracker/tasks/task_store.py

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace

from ..core.clock import SystemClock, today_iso
from ..core.ports import Clock, SnapshotRepo
from . import session_ledger
from .task_errors import ActivityNotFound, TaskNotFound, ValidationError
from .task_models import Activity, Task, TaskStatus

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Task name cannot be empty.")
    return cleaned


class TaskStore:
    """
    In-memory task collection + timer state machine.

    Every operation is a read-modify-write over the whole collection under one
    lock, so the single-running-timer rule can be enforced atomically. Tasks are
    frozen; each mutation swaps in a new tuple and returns it.

    Validation happens before anything is replaced: a raised TaskError means
    the collection is exactly what it was before the call.

    After each mutation the new snapshot is handed to the SnapshotRepo (if any),
    starting from the first time the collection is non-empty. tick() only
    refreshes the display field and never saves.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        repo: SnapshotRepo | None = None,
        today: Callable[[], str] = today_iso,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock: Clock = clock or SystemClock()
        self._repo = repo
        self._today = today
        self._id_factory = id_factory

        self._lock = threading.RLock()
        self._tasks: tuple[Task, ...] = ()
        self._has_saved_state = False

    # ---- low-level helpers ----

    def _index_of(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise TaskNotFound(task_id)

    def _replace_at(self, index: int, task: Task) -> tuple[Task, ...]:
        return self._tasks[:index] + (task,) + self._tasks[index + 1 :]

    def _commit(self, tasks: tuple[Task, ...]) -> tuple[Task, ...]:
        self._tasks = tasks
        if tasks:
            self._has_saved_state = True
        if self._repo is not None and self._has_saved_state:
            try:
                self._repo.save(tasks)
            except Exception:
                logger.exception("Snapshot save failed (%d tasks).", len(tasks))
        return tasks

    @staticmethod
    def _close_timer(task: Task, now_ms: int, *, keep_partial: bool) -> Task:
        """
        Fold the open session (if any) into the accumulators and stop the timer.

        keep_partial=False is the pause path: sub-second runs are dropped.
        keep_partial=True is the complete/reopen path: they are still recorded.
        """
        if task.is_timer_active and task.timer_start_time is not None:
            duration, session = session_ledger.close(
                task.timer_start_time, now_ms, keep_partial=keep_partial
            )
            if session is not None:
                task = session_ledger.append_session(task, session)
                logger.debug("Task %s closed session of %ds", task.id, duration)
        return replace(
            task,
            is_timer_active=False,
            timer_start_time=None,
            current_session_time=0,
            active_time=task.base_active_time,
        )

    # ---- read-only API ----

    def list_tasks(self) -> tuple[Task, ...]:
        return self._tasks

    def get_task(self, task_id: str) -> Task:
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def active_task(self) -> Task | None:
        for task in self._tasks:
            if task.is_timer_active:
                return task
        return None

    def count_tasks(self) -> int:
        return len(self._tasks)

    # ---- startup ----

    def load(self, tasks: Iterable[Task]) -> tuple[Task, ...]:
        """
        Replace the collection with a previously saved snapshot.

        Repairs what a hand-edited or stale file can break: duplicate ids are
        dropped, and if several tasks claim the running timer only the most
        recently started one keeps it (the others lose their open interval).
        Does not save.
        """
        seen: set[str] = set()
        loaded: list[Task] = []
        for task in tasks:
            if task.id in seen:
                logger.warning("Dropping duplicate task id=%s from snapshot", task.id)
                continue
            seen.add(task.id)
            loaded.append(task)

        running = [t for t in loaded if t.is_timer_active]
        if len(running) > 1:
            keep = max(running, key=lambda t: t.timer_start_time or 0)
            logger.warning(
                "Snapshot had %d running timers; keeping task id=%s", len(running), keep.id
            )
            loaded = [
                t
                if not t.is_timer_active or t.id == keep.id
                else replace(
                    t,
                    is_timer_active=False,
                    timer_start_time=None,
                    current_session_time=0,
                    active_time=t.base_active_time,
                )
                for t in loaded
            ]

        with self._lock:
            self._tasks = tuple(loaded)
            self._has_saved_state = bool(self._tasks)
            logger.info("TaskStore loaded %d tasks", len(self._tasks))
            return self._tasks

    def load_from_repo(self) -> tuple[Task, ...]:
        if self._repo is None:
            return self._tasks
        return self.load(self._repo.load())

    # ---- mutations ----

    def create_task(
        self, name: str, description: str = "", *, priority: str = ""
    ) -> tuple[Task, ...]:
        """Append a new Pending task with zeroed timing. It is the last element."""
        clean = _clean_name(name)
        with self._lock:
            task = Task(
                id=self._id_factory(),
                name=clean,
                description=(description or "").strip(),
                priority=(priority or "").strip(),
                status=TaskStatus.PENDING,
                assigned_date=self._today(),
            )
            logger.info("Task created id=%s name=%r", task.id, task.name)
            return self._commit(self._tasks + (task,))

    def edit_task(
        self,
        task_id: str,
        name: str,
        description: str = "",
        activities: Sequence[Activity] | None = None,
    ) -> tuple[Task, ...]:
        """Replace name/description (and activities, when given). Timing and status stay."""
        clean = _clean_name(name)
        with self._lock:
            idx = self._index_of(task_id)
            current = self._tasks[idx]
            updated = replace(
                current,
                name=clean,
                description=(description or "").strip(),
                activities=current.activities if activities is None else tuple(activities),
            )
            logger.debug("Task edited id=%s", task_id)
            return self._commit(self._replace_at(idx, updated))

    def add_activity(self, task_id: str, text: str) -> tuple[Task, ...]:
        clean = (text or "").strip()
        if not clean:
            raise ValidationError("Activity text cannot be empty.")
        with self._lock:
            task = self._tasks[self._index_of(task_id)]
            entry = Activity(id=self._id_factory(), text=clean, timestamp=self._clock.now_ms())
            return self.edit_task(
                task_id, task.name, task.description, (*task.activities, entry)
            )

    def remove_activity(self, task_id: str, activity_id: str) -> tuple[Task, ...]:
        with self._lock:
            task = self._tasks[self._index_of(task_id)]
            kept = tuple(a for a in task.activities if a.id != activity_id)
            if len(kept) == len(task.activities):
                raise ActivityNotFound(task_id, activity_id)
            return self.edit_task(task_id, task.name, task.description, kept)

    def delete_task(self, task_id: str) -> tuple[Task, ...]:
        """
        Remove a task. A running timer on it is dropped without crediting
        the open interval; pause first if that time should count.
        """
        with self._lock:
            idx = self._index_of(task_id)
            task = self._tasks[idx]
            if task.is_timer_active:
                logger.info("Deleting running task id=%s; open session discarded", task_id)
            else:
                logger.info("Task deleted id=%s", task_id)
            return self._commit(self._tasks[:idx] + self._tasks[idx + 1 :])

    def delete_session(self, task_id: str, index: int) -> tuple[Task, ...]:
        with self._lock:
            idx = self._index_of(task_id)
            updated = session_ledger.remove_session(self._tasks[idx], index)
            logger.info("Task %s session #%d deleted", task_id, index)
            return self._commit(self._replace_at(idx, updated))

    def start_timer(self, task_id: str) -> tuple[Task, ...]:
        """
        Give the task the running timer (status -> in progress).

        Any other running task is paused first, with the same sub-second rule
        as pause_timer. Starting the task that already runs is a no-op.
        """
        with self._lock:
            idx = self._index_of(task_id)
            if self._tasks[idx].is_timer_active:
                return self._tasks

            now = self._clock.now_ms()
            out: list[Task] = []
            for task in self._tasks:
                if task.id == task_id:
                    task = replace(
                        task,
                        is_timer_active=True,
                        timer_start_time=now,
                        base_active_time=task.active_time,
                        current_session_time=0,
                        status=TaskStatus.IN_PROGRESS,
                    )
                elif task.is_timer_active:
                    logger.info("Task %s paused by start of %s", task.id, task_id)
                    task = self._close_timer(task, now, keep_partial=False)
                out.append(task)

            logger.info("Timer started task id=%s", task_id)
            return self._commit(tuple(out))

    def pause_timer(self, task_id: str) -> tuple[Task, ...]:
        """Stop the running timer, keeping the status. No-op when it is not running."""
        with self._lock:
            idx = self._index_of(task_id)
            task = self._tasks[idx]
            if not task.is_timer_active:
                logger.debug("pause_timer on idle task id=%s ignored", task_id)
                return self._tasks

            updated = self._close_timer(task, self._clock.now_ms(), keep_partial=False)
            logger.info("Timer paused task id=%s total=%ds", task_id, updated.active_time)
            return self._commit(self._replace_at(idx, updated))

    def toggle_timer(self, task_id: str) -> tuple[Task, ...]:
        with self._lock:
            if self.get_task(task_id).is_timer_active:
                return self.pause_timer(task_id)
            return self.start_timer(task_id)

    def _finish_with_status(self, task_id: str, status: TaskStatus) -> tuple[Task, ...]:
        with self._lock:
            idx = self._index_of(task_id)
            updated = self._close_timer(
                self._tasks[idx], self._clock.now_ms(), keep_partial=True
            )
            updated = replace(updated, status=status)
            logger.info("Task %s -> %s", task_id, status.value)
            return self._commit(self._replace_at(idx, updated))

    def complete_task(self, task_id: str) -> tuple[Task, ...]:
        return self._finish_with_status(task_id, TaskStatus.COMPLETED)

    def reopen_task(self, task_id: str) -> tuple[Task, ...]:
        return self._finish_with_status(task_id, TaskStatus.IN_PROGRESS)

    # ---- ticker ----

    def tick(self, now_ms: int | None = None) -> tuple[Task, ...]:
        """
        Refresh current_session_time of the running task from the clock.

        Touches nothing else and does not save. Cheap no-op when idle.
        """
        with self._lock:
            for idx, task in enumerate(self._tasks):
                if not task.is_timer_active or task.timer_start_time is None:
                    continue
                now = self._clock.now_ms() if now_ms is None else now_ms
                seconds = session_ledger.elapsed_seconds(task.timer_start_time, now)
                if seconds == task.current_session_time:
                    return self._tasks
                self._tasks = self._replace_at(idx, replace(task, current_session_time=seconds))
                return self._tasks
            return self._tasks
