# -*- coding: utf-8 -*-
"""Tests for the autosave scheduler core (PyQt-free, manual clock)."""

import asyncio

from services.autosave.scheduler_core import AutosaveScheduler


def _scheduler(timers, fired, armed=None):
    return AutosaveScheduler(
        lambda: fired.append(timers.now),
        delay_ms=30_000,
        timer_factory=timers,
        on_armed_changed=(armed.append if armed is not None else None),
    )


def test_debounce_and_coalesce(timers):
    fired = []
    s = _scheduler(timers, fired)
    s.notify_changed()
    timers.advance(20)
    s.notify_changed()
    timers.advance(20)
    assert fired == []
    timers.advance(10)
    assert fired == [50.0]
    assert s.pending is False


def test_fires_at_most_once_and_does_not_rearm(timers):
    fired = []
    s = _scheduler(timers, fired)
    s.notify_changed()
    timers.advance(31)
    timers.advance(300)
    assert len(fired) == 1
    assert timers.active == 0


def test_cancel_stops_pending_timer(timers):
    fired, armed = [], []
    s = _scheduler(timers, fired, armed)
    s.notify_changed()
    s.cancel()
    timers.advance(60)
    assert fired == []
    assert armed == [True, False]


def test_close_prevents_any_further_fire(timers):
    fired = []
    s = _scheduler(timers, fired)
    s.notify_changed()
    s.close()
    s.notify_changed()
    timers.advance(60)
    assert fired == []
    assert s.closed is True
    assert s.pending is False


def test_late_callback_of_replaced_timer_is_ignored(timers):
    fired = []
    s = _scheduler(timers, fired)
    s.notify_changed()
    stale = timers._timers[0]
    s.notify_changed()
    stale.callback()
    assert fired == []


def test_asyncio_backend_fires_on_running_loop():
    fired = []

    async def scenario():
        s = AutosaveScheduler(lambda: fired.append("x"), delay_ms=10)
        s.notify_changed()
        s.notify_changed()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert fired == ["x"]
