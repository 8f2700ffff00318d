# -*- coding: utf-8 -*-
"""Save timings.

Set ``CASEDESK_PERF=1`` to time every save cycle. Each cycle is logged on the
``casedesk.perf`` logger (a separate ``perf.log`` once bootstrap has run) as

    PERF save reason=autosave records=3 41.7ms

and the last few timings stay available through ``recent_timings()`` for a
status panel or a test. ``CASEDESK_PERF_MIN_MS`` hides cycles faster than the
given number of milliseconds from the log; they are still recorded.
"""

from __future__ import annotations

import logging
import os
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List, Optional

log = logging.getLogger("casedesk.perf")

_TRUE = ("1", "true", "yes", "on")
_recent: Deque["Timing"] = deque(maxlen=50)


@dataclass
class Timing:
    label: str
    fields: Dict[str, Any] = field(default_factory=dict)
    elapsed_ms: float = 0.0


def is_enabled() -> bool:
    return os.environ.get("CASEDESK_PERF", "").strip().lower() in _TRUE


def _min_ms() -> float:
    try:
        return float(os.environ.get("CASEDESK_PERF_MIN_MS", "0") or 0)
    except ValueError:
        return 0.0


@contextmanager
def span(label: str, **fields: Any) -> Iterator[Optional[Timing]]:
    """Time the block; yields None when timings are off.

    Wall time only, so a block that awaits includes the time spent waiting on
    the store.
    """
    if not is_enabled():
        yield None
        return
    timing = Timing(label, dict(fields))
    t0 = time.perf_counter()
    try:
        yield timing
    finally:
        timing.elapsed_ms = (time.perf_counter() - t0) * 1000.0
        _recent.append(timing)
        if timing.elapsed_ms >= _min_ms():
            detail = " ".join(f"{k}={v}" for k, v in timing.fields.items())
            log.info("PERF %s %s %.1fms", label, detail, timing.elapsed_ms)


def recent_timings() -> List[Timing]:
    return list(_recent)


def clear_timings() -> None:
    _recent.clear()
