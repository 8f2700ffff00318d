# -*- coding: utf-8 -*-
"""Table view over a RosterSession.

Layout: toolbar (edit toggle, save, status label) above a QTableWidget with one
row per record. The window only forwards user intent to the session and
repaints from the session's events; it holds no roster state of its own.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from app.events import ChangesDiscarded, ModeChanged, RecordEdited, RosterLoaded, SaveFinished, SaveStarted
from app.mode_controller import Mode
from app.roster_session import RosterSession
from core.records import normalize_scalar
from services.errors import EngineError
from ui.async_pump import AsyncioPump
from ui.unsaved_changes import UnsavedChangesFilter, ask_discard

log = logging.getLogger(__name__)

DIRTY_COLOR = QColor("#fff4c2")


class RosterWindow(QWidget):
    def __init__(self, session: RosterSession, pump: AsyncioPump, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.session = session
        self.pump = pump
        self._painting = False
        self._columns: List[str] = []

        self.btn_edit = QPushButton("Edit")
        self.btn_save = QPushButton("Save")
        self.lbl_status = QLabel("")
        self.lbl_report = QLabel("")
        self.table = QTableWidget(0, 0)

        top = QHBoxLayout()
        top.addWidget(self.btn_edit)
        top.addWidget(self.btn_save)
        top.addStretch(1)
        top.addWidget(self.lbl_report)
        top.addWidget(self.lbl_status)

        layout = QVBoxLayout(self)
        layout.addLayout(top)
        layout.addWidget(self.table)

        self.btn_edit.clicked.connect(self._on_toggle_mode)
        self.btn_save.clicked.connect(self._on_save)
        self.table.itemChanged.connect(self._on_item_changed)

        bus = session.bus
        bus.subscribe(RosterLoaded, lambda _e: self.rebuild())
        bus.subscribe(RecordEdited, self._on_record_edited)
        bus.subscribe(SaveStarted, lambda _e: self.update_status())
        bus.subscribe(SaveFinished, self._on_save_finished)
        bus.subscribe(ChangesDiscarded, lambda _e: self.repaint_rows())
        bus.subscribe(ModeChanged, lambda _e: self._apply_mode())

        self._close_filter = UnsavedChangesFilter(self, session.guard)

    # --------- painting ---------
    def _columns_for_roster(self) -> List[str]:
        schema = self.session.tracker.schema
        if schema.fields:
            return list(schema.fields)
        names = set()
        for rid in self.session.roster:
            names.update(self.session.value(rid))
        return sorted(names)

    def rebuild(self) -> None:
        self._columns = self._columns_for_roster()
        self._painting = True
        try:
            self.table.clear()
            self.table.setColumnCount(len(self._columns))
            self.table.setHorizontalHeaderLabels(self._columns)
            roster = self.session.roster
            self.table.setRowCount(len(roster))
            self.table.setVerticalHeaderLabels([str(rid) for rid in roster])
        finally:
            self._painting = False
        self.repaint_rows()
        self._apply_mode()

    def repaint_rows(self) -> None:
        self._painting = True
        try:
            for row, rid in enumerate(self.session.roster):
                self._paint_row(row, rid)
        finally:
            self._painting = False
        self.update_status()

    def _paint_row(self, row: int, rid) -> None:
        value = self.session.value(rid)
        dirty = set(self.session.dirty_fields(rid))
        for col, name in enumerate(self._columns):
            item = self.table.item(row, col)
            if item is None:
                item = QTableWidgetItem()
                self.table.setItem(row, col, item)
            item.setText(value.get(name) or "")
            item.setBackground(DIRTY_COLOR if name in dirty else QColor(Qt.white))

    def update_status(self) -> None:
        self.lbl_status.setText(self.session.get_status_label())
        self.btn_save.setEnabled(self.session.get_dirty_count() > 0 and not self.session.persisting)

    def _apply_mode(self) -> None:
        editing = self.session.mode.edits_allowed
        self.btn_edit.setText("Done" if editing else "Edit")
        triggers = QTableWidget.DoubleClicked | QTableWidget.EditKeyPressed if editing else QTableWidget.NoEditTriggers
        self.table.setEditTriggers(triggers)

    # --------- user intent ---------
    def _on_item_changed(self, item: QTableWidgetItem) -> None:
        if self._painting:
            return
        rid = self.session.roster[item.row()]
        try:
            value = normalize_scalar(item.text(), blank_as_none=True)
            self.session.edit(rid, self._columns[item.column()], value)
        except EngineError as exc:
            QMessageBox.warning(self, "Edit rejected", str(exc))
            self.repaint_rows()

    def _on_record_edited(self, event: RecordEdited) -> None:
        if self._painting:
            return
        try:
            row = self.session.roster.index(event.record_id)
        except ValueError:
            return
        self._painting = True
        try:
            self._paint_row(row, event.record_id)
        finally:
            self._painting = False
        self.update_status()

    def _on_toggle_mode(self) -> None:
        mode = self.session.toggle_mode()
        if mode is not Mode.CONFIRM_DISCARD:
            return
        count = self.session.get_dirty_count()
        noun = "change" if count == 1 else "changes"
        if ask_discard(self, f"Discard {count} unsaved {noun}?"):
            self.session.confirm_discard()
        else:
            self.session.cancel_exit()

    def _on_save(self) -> None:
        self.btn_save.setEnabled(False)
        self.pump.submit(self.session.save_now(), on_done=self._on_saved, on_error=self._on_save_error)

    def _on_save_finished(self, event: SaveFinished) -> None:
        self.repaint_rows()
        self.lbl_report.setText(self.session.get_last_report() or "")
        # Manual saves report through _on_saved.
        if event.reason == "autosave" and not event.result.ok:
            self._warn_failures(event.result)

    def _on_saved(self, result) -> None:
        self.repaint_rows()
        if not result.ok:
            self._warn_failures(result)

    def _warn_failures(self, result) -> None:
        failed = "\n".join(f"{rid}: {reason}" for rid, reason in result.failed.items())
        QMessageBox.warning(self, result.summary(), failed)

    def _on_save_error(self, exc: BaseException) -> None:
        log.error("Save failed: %s", exc)
        self.update_status()
        QMessageBox.critical(self, "Save failed", str(exc))
