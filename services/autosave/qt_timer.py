# -*- coding: utf-8 -*-
"""Qt-backed timer factory for the autosave scheduler (single-shot QTimer)."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from services.autosave.scheduler_core import TimerFactory

log = logging.getLogger(__name__)

try:
    from PyQt5.QtCore import QObject, QTimer
except Exception:  # pragma: no cover - optional for test environments
    QObject = None
    QTimer = None


if QTimer is not None:

    class _QtTimerHandle:
        def __init__(self, timer: QTimer) -> None:
            self._timer = timer

        def cancel(self) -> None:
            timer, self._timer = self._timer, None
            if timer is None:
                return
            timer.stop()
            timer.deleteLater()

    def qt_timer_factory(parent: Optional[QObject] = None) -> TimerFactory:
        """Timers delivered on the Qt event loop of ``parent``'s thread."""

        def _start(delay_s: float, callback: Callable[[], None]) -> _QtTimerHandle:
            timer = QTimer(parent)
            timer.setSingleShot(True)
            timer.setInterval(int(round(delay_s * 1000.0)))
            timer.timeout.connect(callback)
            timer.start()
            return _QtTimerHandle(timer)

        return _start

else:

    def qt_timer_factory(parent=None) -> TimerFactory:  # pragma: no cover
        raise RuntimeError("PyQt5 is required to use qt_timer_factory")
