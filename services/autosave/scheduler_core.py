# -*- coding: utf-8 -*-
"""Debounced autosave scheduler (no UI dependencies).

The scheduler owns one timer handle. Every ``notify_changed()`` restarts the
quiet period; the timer fires at most once and is never re-armed by itself.
Timers come from a factory so the same scheduler runs on asyncio, on a Qt
event loop or on a manual clock in tests.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


# (delay_seconds, callback) -> handle
TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def asyncio_timer_factory(loop: Optional[asyncio.AbstractEventLoop] = None) -> TimerFactory:
    """Timers on the running asyncio loop (``loop.call_later``)."""

    def _start(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        target = loop or asyncio.get_running_loop()
        return target.call_later(delay_s, callback)

    return _start


class AutosaveScheduler:
    def __init__(
        self,
        on_fire: Callable[[], None],
        *,
        delay_ms: int,
        timer_factory: Optional[TimerFactory] = None,
        on_armed_changed: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._on_fire = on_fire
        self._delay_ms = int(delay_ms)
        self._timer_factory = timer_factory or asyncio_timer_factory()
        self._on_armed_changed = on_armed_changed
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._closed = False
        self.fire_count = 0

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def notify_changed(self) -> None:
        """Called after every Working mutation: restart the quiet period."""
        self.arm()

    def arm(self, delay_ms: Optional[int] = None) -> None:
        if self._closed:
            return
        self._drop_handle()
        self._generation += 1
        gen = self._generation
        ms = self._delay_ms if delay_ms is None else int(delay_ms)
        self._handle = self._timer_factory(max(ms, 0) / 1000.0, lambda: self._fire(gen))
        self._set_armed(True)

    def cancel(self) -> None:
        if self._handle is None:
            return
        self._drop_handle()
        self._generation += 1
        self._set_armed(False)

    def close(self) -> None:
        """Teardown: cancel and refuse any further arming."""
        self.cancel()
        self._closed = True

    def _drop_handle(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _fire(self, generation: int) -> None:
        # A backend may still deliver a callback that was cancelled late.
        if self._closed or generation != self._generation or self._handle is None:
            return
        self._handle = None
        self._set_armed(False)
        self.fire_count += 1
        log.debug("Autosave timer fired (#%s)", self.fire_count)
        self._on_fire()

    def _set_armed(self, armed: bool) -> None:
        if self._on_armed_changed is None:
            return
        try:
            self._on_armed_changed(bool(armed))
        except Exception:
            log.debug("on_armed_changed callback failed", exc_info=True)
