# src/work_tracker/tasks/task_scheduler.py

from __future__ import annotations

"""
Tick scheduler.

A small polling loop that, about once per second:
- checks whether any task owns the running timer,
- if so, asks the store to refresh that task's current_session_time,
- hands the refreshed collection to an optional on_tick callback (display).

It never persists and never changes accumulated time.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ..core.clock import SystemClock
from ..core.ports import Clock
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

TickCallback = Callable[[tuple[Task, ...]], None]

# Shortest sleep between ticks; Settings applies the same floor.
MIN_TICK_INTERVAL_SECONDS = 0.01


async def run_tick_scheduler(
        task_store: TaskStore,
        *,
        clock: Clock | None = None,
        interval_seconds: float = 1.0,
        on_tick: TickCallback | None = None,
) -> None:
    """
    Refresh loop for the running timer.

    Every interval_seconds:
    - skip entirely when no task is timing (just sleep again)
    - otherwise call task_store.tick(now) and pass the result to on_tick

    To stop the scheduler, cancel the coroutine/task.
    """
    clock = clock or SystemClock()
    sleep_s = max(MIN_TICK_INTERVAL_SECONDS, float(interval_seconds))

    while True:
        if task_store.active_task() is not None:
            try:
                tasks = task_store.tick(clock.now_ms())
            except Exception:
                logger.exception("tick failed")
            else:
                if on_tick is not None:
                    try:
                        on_tick(tasks)
                    except Exception:
                        logger.exception("on_tick callback failed")

        await asyncio.sleep(sleep_s)


@dataclass(slots=True)
class TickerBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal ticker stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


async def _run_until_stopped(
        task_store: TaskStore,
        stop_event: asyncio.Event,
        *,
        clock: Clock | None,
        interval_seconds: float,
        on_tick: TickCallback | None,
) -> None:
    ticker = asyncio.create_task(
        run_tick_scheduler(
            task_store,
            clock=clock,
            interval_seconds=interval_seconds,
            on_tick=on_tick,
        )
    )
    try:
        await stop_event.wait()
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
    logger.info("Ticker stopped.")


def start_ticker_in_background(
        task_store: TaskStore,
        *,
        clock: Clock | None = None,
        interval_seconds: float = 1.0,
        on_tick: TickCallback | None = None,
) -> TickerBackgroundRunner | None:
    """
    Start the tick loop on its own thread + event loop.

    The console REPL blocks on input(), so the ticker cannot share its thread.
    Call stop() then join() on the returned runner to cancel the wake-ups.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                _run_until_stopped(
                    task_store,
                    stop_event,
                    clock=clock,
                    interval_seconds=interval_seconds,
                    on_tick=on_tick,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="tick-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Ticker thread did not initialize properly.")
        return None

    logger.info("Ticker background thread started (interval=%.2fs).", interval_seconds)
    return TickerBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
