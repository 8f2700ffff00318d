# -*- coding: utf-8 -*-
"""Drive a private asyncio loop from the Qt event loop.

Qt owns the main thread, so the roster session's coroutines run on an
asyncio loop that a repeating QTimer advances one iteration at a time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from PyQt5.QtCore import QObject, QTimer

log = logging.getLogger(__name__)


class AsyncioPump(QObject):
    def __init__(self, parent: Optional[QObject] = None, *, interval_ms: int = 15) -> None:
        super().__init__(parent)
        self.loop = asyncio.new_event_loop()
        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_ms))
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    def _tick(self) -> None:
        if self.loop.is_closed() or self.loop.is_running():
            return
        self.loop.call_soon(self.loop.stop)
        self.loop.run_forever()

    def submit(
        self,
        coro: Awaitable[Any],
        *,
        on_done: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> asyncio.Task:
        task = self.loop.create_task(coro)

        def _done(t: asyncio.Task) -> None:
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                if on_error is not None:
                    on_error(exc)
                else:
                    log.error("Background task failed", exc_info=exc)
                return
            if on_done is not None:
                on_done(t.result())

        task.add_done_callback(_done)
        return task

    def run_until_complete(self, coro: Awaitable[Any]) -> Any:
        """Blocking run, for startup loads before the window is shown."""
        return self.loop.run_until_complete(coro)

    def close(self) -> None:
        self._timer.stop()
        if self.loop.is_closed():
            return
        pending = [t for t in asyncio.all_tasks(self.loop) if not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        self.loop.close()
