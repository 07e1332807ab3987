# src/work_tracker/storage/snapshot_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..core.ports import SnapshotRepo
from ..tasks.task_errors import PersistenceReadError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


class JsonSnapshotStore:
    """
    Whole-collection snapshot in one JSON file (a list of task dicts).

    - load(): missing file -> empty; unreadable/malformed -> logged, empty
    - save(): temp file + os.replace, so a crash never leaves half a file;
      failures are logged, never raised
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _parse(self, raw: str) -> tuple[Task, ...]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceReadError(f"Invalid JSON in {self._path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceReadError(f"Expected a list of tasks in {self._path}")

        tasks: list[Task] = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise PersistenceReadError(f"Task record #{i} is not an object")
            try:
                tasks.append(Task.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                raise PersistenceReadError(f"Task record #{i} is malformed: {e!r}") from e
        return tuple(tasks)

    def load(self) -> tuple[Task, ...]:
        if not self._path.exists():
            logger.info("No saved tasks at %s", self._path)
            return ()
        try:
            tasks = self._parse(self._path.read_text("utf-8"))
        except (OSError, PersistenceReadError):
            logger.exception("Failed to load saved tasks from %s; starting empty", self._path)
            return ()
        logger.info("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            payload = [t.to_dict() for t in tasks]
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
            logger.debug("Saved %d tasks to %s", len(payload), self._path)
        except Exception:
            logger.exception("Failed to save tasks to %s", self._path)


class BackgroundSnapshotWriter:
    """
    Fire-and-forget wrapper: save() queues the write on one worker thread.

    One worker keeps writes in submission order, so the file always ends up
    with the latest snapshot. close() waits for queued writes.
    """

    def __init__(self, repo: SnapshotRepo) -> None:
        self._repo = repo
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot-writer")

    def load(self) -> tuple[Task, ...]:
        return self._repo.load()

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            self._executor.submit(self._repo.save, tuple(tasks))
        except RuntimeError:
            # Executor already shut down: fall back to a direct write.
            logger.warning("Snapshot writer closed; saving synchronously")
            self._repo.save(tuple(tasks))

    def close(self) -> None:
        with contextlib.suppress(Exception):
            self._executor.shutdown(wait=True)
