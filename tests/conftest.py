# -*- coding: utf-8 -*-

"""Pytest configuration.

The engine uses a flat layout of top-level packages. For local testing we add
the repository root to sys.path so that imports like `from core...` work
without an install.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, List

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.types import RecordSeed  # noqa: E402
from storage.remote_store import InMemoryRemoteStore  # noqa: E402


class _ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Timer factory driven by ``advance()`` instead of a real clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[_ManualTimer] = []
        self.started = 0

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now + delay_s, callback)
        self._timers.append(timer)
        self.started += 1
        return timer

    @property
    def active(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> int:
        self.now += seconds
        due = sorted((t for t in self._timers if not t.cancelled and t.due <= self.now), key=lambda t: t.due)
        for t in due:
            self._timers.remove(t)
            t.callback()
        self._timers = [t for t in self._timers if not t.cancelled]
        return len(due)


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


def make_store(n: int = 10, *, scope: str = "2024-05-06", field: str = "status") -> InMemoryRemoteStore:
    store = InMemoryRemoteStore()
    store.seed(scope, [RecordSeed(id=f"s{i}", fields={field: None, "name": f"Student {i}"}) for i in range(1, n + 1)])
    return store


@pytest.fixture
def store() -> InMemoryRemoteStore:
    return make_store()
