# -*- coding: utf-8 -*-
"""ui/unsaved_changes.py

Qt front for the navigation guard:
- ``ask_discard()`` shows the Discard/Cancel question.
- ``UnsavedChangesFilter`` intercepts close events of a window and lets the
  guard decide, so a view can be protected without subclassing it.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import QEvent, QObject
from PyQt5.QtWidgets import QMessageBox, QWidget

from app.navigation_guard import NavigationGuard

log = logging.getLogger(__name__)


def ask_discard(parent: Optional[QWidget], message: str, *, title: str = "Unsaved changes") -> bool:
    """Return True when the user chooses to discard and leave."""
    reply = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.Discard | QMessageBox.Cancel,
        QMessageBox.Cancel,
    )
    return reply == QMessageBox.Discard


class UnsavedChangesFilter(QObject):
    """Event filter that vetoes closing ``widget`` while the guard objects."""

    def __init__(self, widget: QWidget, guard: NavigationGuard) -> None:
        super().__init__(widget)
        self._widget = widget
        self._guard = guard
        widget.installEventFilter(self)

    def eventFilter(self, obj, event) -> bool:  # noqa: N802 (Qt API)
        if obj is self._widget and event.type() == QEvent.Close:
            try:
                allowed = self._guard.confirm_leave(lambda msg: ask_discard(self._widget, msg))
            except Exception:
                log.error("Navigation guard failed; allowing close", exc_info=True)
                allowed = True
            if not allowed:
                event.ignore()
                return True
        return super().eventFilter(obj, event)
