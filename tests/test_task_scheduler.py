# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from work_tracker.tasks import session_ledger
from work_tracker.tasks.task_scheduler import (
    MIN_TICK_INTERVAL_SECONDS,
    run_tick_scheduler,
    start_ticker_in_background,
)
from work_tracker.tasks.task_store import TaskStore

from .fakes import FakeClock


class CountingStore(TaskStore):
    """TaskStore that counts tick() calls."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock=clock)
        self.ticks = 0

    def tick(self, now_ms=None):
        self.ticks += 1
        return super().tick(now_ms)


@pytest.mark.asyncio
async def test_scheduler_refreshes_running_task(clock: FakeClock) -> None:
    store = TaskStore(clock=clock)
    store.create_task("A")
    store.start_timer(store.list_tasks()[0].id)
    clock.advance(9)

    seen: list[int] = []

    runner = asyncio.create_task(
        run_tick_scheduler(
            store,
            clock=clock,
            interval_seconds=0.01,
            on_tick=lambda tasks: seen.append(tasks[0].current_session_time),
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert seen, "Scheduler should tick at least once"
    assert seen[-1] == 9
    task = store.list_tasks()[0]
    assert task.current_session_time == 9
    assert task.active_time == 0


@pytest.mark.asyncio
async def test_scheduler_skips_work_when_idle(clock: FakeClock) -> None:
    store = CountingStore(clock)
    store.create_task("A")
    calls: list[object] = []

    runner = asyncio.create_task(
        run_tick_scheduler(store, clock=clock, interval_seconds=0.01, on_tick=calls.append)
    )
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert store.ticks == 0
    assert calls == []


@pytest.mark.asyncio
async def test_scheduler_survives_callback_errors(clock: FakeClock) -> None:
    store = CountingStore(clock)
    store.create_task("A")
    store.start_timer(store.list_tasks()[0].id)

    def boom(_tasks) -> None:
        raise RuntimeError("render failed")

    runner = asyncio.create_task(
        run_tick_scheduler(store, clock=clock, interval_seconds=0.01, on_tick=boom)
    )
    await asyncio.sleep(0.2)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert store.ticks >= 2


def test_background_ticker_stops_cleanly(clock: FakeClock) -> None:
    store = TaskStore(clock=clock)
    store.create_task("A")
    store.start_timer(store.list_tasks()[0].id)
    clock.advance(4)

    runner = start_ticker_in_background(store, clock=clock, interval_seconds=0.01)
    assert runner is not None

    deadline = time.monotonic() + 2.0
    while store.list_tasks()[0].current_session_time != 4 and time.monotonic() < deadline:
        time.sleep(0.01)

    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.thread.is_alive()
    task = store.list_tasks()[0]
    assert task.current_session_time == 4
    assert task.active_time == 0


@pytest.mark.asyncio
async def test_interval_below_floor_still_ticks_repeatedly(clock: FakeClock) -> None:
    store = CountingStore(clock)
    store.create_task("A")
    store.start_timer(store.list_tasks()[0].id)

    runner = asyncio.create_task(run_tick_scheduler(store, clock=clock, interval_seconds=0))
    await asyncio.sleep(MIN_TICK_INTERVAL_SECONDS * 20)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert store.ticks >= 2


def test_ticks_and_timer_switches_from_two_threads(clock: FakeClock) -> None:
    store = TaskStore(clock=clock)
    for name in ("A", "B", "C", "D", "E"):
        store.create_task(name)
    ids = [t.id for t in store.list_tasks()]

    stop = threading.Event()
    ticked = threading.Event()
    running_counts: list[int] = []
    tick_errors: list[Exception] = []

    def ticker() -> None:
        while not stop.is_set():
            try:
                tasks = store.tick()
            except Exception as e:
                tick_errors.append(e)
                return
            running_counts.append(sum(1 for t in tasks if t.is_timer_active))
            ticked.set()

    worker = threading.Thread(target=ticker, name="test-ticker", daemon=True)
    worker.start()
    try:
        assert ticked.wait(timeout=2.0)
        for i in range(3000):
            clock.advance(1)
            tasks = store.start_timer(ids[i % len(ids)])
            assert sum(1 for t in tasks if t.is_timer_active) == 1
        clock.advance(1)
        store.pause_timer(ids[(3000 - 1) % len(ids)])
    finally:
        stop.set()
        worker.join(timeout=5.0)

    assert not worker.is_alive()
    assert tick_errors == []
    assert running_counts, "ticker thread should have run"
    assert set(running_counts) <= {0, 1}

    tasks = store.list_tasks()
    assert store.active_task() is None
    for task in tasks:
        assert task.active_time == task.base_active_time
        assert task.base_active_time == session_ledger.total_duration(task.sessions)
        assert task.current_session_time == 0
    assert sum(t.active_time for t in tasks) == 3000
