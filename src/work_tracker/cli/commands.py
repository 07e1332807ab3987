# src/work_tracker/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import format_duration, group_by_status, resolve_task
from ..tasks.task_errors import TaskError
from ..tasks.task_export import write_export
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /start, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Task errors (unknown task, empty name, bad session number) become the reply.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TaskError as e:
            logger.debug("/%s rejected: %s", name, e)
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

def _split_name_description(words: list[str]) -> tuple[str, str | None]:
    """
    'Write report | for Q3' -> ('Write report', 'for Q3').

    The description is None when no "|" was typed.
    """
    text = " ".join(words)
    name, sep, description = text.partition("|")
    return name.strip(), description.strip() if sep else None


def _find(state: AppState, ref: str | None) -> Task | None:
    if not ref:
        return None
    return resolve_task(state.task_store.list_tasks(), ref)


def _no_match(ref: str) -> str:
    return f"No task matches {ref!r}. Use /list to see positions."


def _position(state: AppState, task: Task) -> int:
    for i, t in enumerate(state.task_store.list_tasks(), start=1):
        if t.id == task.id:
            return i
    return 0


def _task_line(state: AppState, task: Task) -> str:
    marker = " [RUNNING]" if task.is_timer_active else ""
    total = format_duration(task.active_time)
    if task.is_timer_active:
        total += f" (+{format_duration(task.current_session_time)})"
    return f"  {_position(state, task)}. {task.name} - {total}, {len(task.sessions)} sessions{marker}"


def _ts_local(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M:%S")


# ---- commands ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.task_store
    active = store.active_task()
    running = (
        f"{active.name} ({format_duration(active.current_session_time)} this session)"
        if active
        else "none"
    )
    snapshot = getattr(state.settings, "snapshot_path", "?")
    return (
        "Status:\n"
        f"  Tasks: {store.count_tasks()}\n"
        f"  Running timer: {running}\n"
        f"  Snapshot: {snapshot}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No tasks yet. Add one with /add <name> | <description>."
    sections = group_by_status(tasks)
    lines: list[str] = []
    for title, group in (
        ("Pending", sections.pending),
        ("In Progress", sections.in_progress),
        ("Completed", sections.completed),
    ):
        lines.append(f"{title} ({len(group)}):")
        lines.extend(_task_line(state, t) for t in group)
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    ref = args[0] if args else ""
    task = _find(state, ref)
    if task is None:
        return _no_match(ref)
    lines = [
        f"{task.name} [{task.status.value}] id={task.id}",
        f"  Assigned: {task.assigned_date}",
        f"  Total active time: {format_duration(task.active_time)}",
    ]
    if task.description:
        lines.append(f"  Description: {task.description}")
    if task.is_timer_active:
        lines.append(f"  Current session: {format_duration(task.current_session_time)}")
    for i, s in enumerate(task.sessions, start=1):
        secs = (s.end - s.start) // 1000
        lines.append(f"  Session {i}: {_ts_local(s.start)} -> {_ts_local(s.end)} ({format_duration(secs)})")
    for i, a in enumerate(task.activities, start=1):
        lines.append(f"  Note {i}: [{_ts_local(a.timestamp)}] {a.text}")
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    name, description = _split_name_description(args)
    tasks = state.task_store.create_task(name, description or "")
    return f"Added task {len(tasks)}: {tasks[-1].name}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <task> <name> | <description>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    name, description = _split_name_description(args[1:])
    if description is None:
        description = task.description
    state.task_store.edit_task(task.id, name, description)
    return f"Updated: {name}"


def cmd_note(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /note <task> <text>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    state.task_store.add_activity(task.id, " ".join(args[1:]))
    return f"Activity added to {task.name}."


def cmd_rmnote(state: AppState, args: list[str]) -> str:
    """
    /rmnote <task> <n>  -> delete activity n (as numbered by /show)
    """
    if len(args) < 2 or not args[1].isdigit():
        return "Usage: /rmnote <task> <activity number>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    number = int(args[1])
    if not 1 <= number <= len(task.activities):
        return f"{task.name} has no activity {number} ({len(task.activities)} logged)."
    state.task_store.remove_activity(task.id, task.activities[number - 1].id)
    return f"Activity {number} removed from {task.name}."


def _timer_target(state: AppState, args: list[str]) -> Task | None:
    """Explicit task ref, or the running task when omitted."""
    if args:
        return _find(state, args[0])
    return state.task_store.active_task()


def cmd_start(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /start <task>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    previous = state.task_store.active_task()
    state.task_store.start_timer(task.id)
    if previous is not None and previous.id != task.id:
        return f"Paused {previous.name}. Timer running for {task.name}."
    return f"Timer running for {task.name}."


def cmd_pause(state: AppState, args: list[str]) -> str:
    task = _timer_target(state, args)
    if task is None:
        return _no_match(args[0]) if args else "No timer is running."
    if not task.is_timer_active:
        return f"Timer for {task.name} is not running."
    tasks = state.task_store.pause_timer(task.id)
    updated = next(t for t in tasks if t.id == task.id)
    return f"Paused {updated.name}. Total: {format_duration(updated.active_time)}"


def cmd_toggle(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /toggle <task>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    if task.is_timer_active:
        return cmd_pause(state, args)
    return cmd_start(state, args)


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _timer_target(state, args)
    if task is None:
        return _no_match(args[0]) if args else "Usage: /done <task>"
    state.task_store.complete_task(task.id)
    return f"Completed: {task.name}"


def cmd_reopen(state: AppState, args: list[str]) -> str:
    task = _find(state, args[0]) if args else None
    if task is None:
        return _no_match(args[0]) if args else "Usage: /reopen <task>"
    state.task_store.reopen_task(task.id)
    return f"Back in progress: {task.name}"


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _find(state, args[0]) if args else None
    if task is None:
        return _no_match(args[0]) if args else "Usage: /rm <task>"
    if task.is_timer_active and emit:
        with contextlib.suppress(Exception):
            emit(f"Timer for {task.name} was running; the open session is not counted.")
    state.task_store.delete_task(task.id)
    return f"Deleted: {task.name}"


def cmd_rmsession(state: AppState, args: list[str]) -> str:
    """
    /rmsession <task> <n>  -> delete session n (as numbered by /show)
    """
    if len(args) < 2 or not args[1].lstrip("-").isdigit():
        return "Usage: /rmsession <task> <session number>"
    task = _find(state, args[0])
    if task is None:
        return _no_match(args[0])
    number = int(args[1])
    tasks = state.task_store.delete_session(task.id, number - 1)
    updated = next(t for t in tasks if t.id == task.id)
    return f"Session {number} removed. Total: {format_duration(updated.active_time)}"


def cmd_export(state: AppState, args: list[str]) -> str:
    """
    /export        -> JSON backup
    /export csv    -> spreadsheet table
    """
    fmt = args[0].lower() if args else "json"
    if fmt not in ("json", "csv"):
        return "Usage: /export [json|csv]"
    export_dir = getattr(state.settings, "export_dir", ".")
    path = write_export(state.task_store.list_tasks(), export_dir, fmt=fmt)
    return f"Exported to {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count and the running timer.")
registry.register("list", cmd_list, help_text="List tasks by status.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Task details: /show <task>.")
registry.register("add", cmd_add, help_text="Add a task: /add <name> | <description>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <task> <name> | <description>.")
registry.register("note", cmd_note, help_text="Log an activity: /note <task> <text>.")
registry.register("rmnote", cmd_rmnote, help_text="Delete an activity: /rmnote <task> <n>.")
registry.register("start", cmd_start, help_text="Start the timer: /start <task>.")
registry.register("pause", cmd_pause, help_text="Pause the timer: /pause [task].")
registry.register("toggle", cmd_toggle, help_text="Start or pause: /toggle <task>.", aliases=["t"])
registry.register("done", cmd_done, help_text="Mark completed: /done [task].")
registry.register("reopen", cmd_reopen, help_text="Mark in progress again: /reopen <task>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <task>.")
registry.register("rmsession", cmd_rmsession, help_text="Delete a session: /rmsession <task> <n>.")
registry.register("export", cmd_export, help_text="Export data: /export [json|csv].")
