# -*- coding: utf-8 -*-
"""Regression tests for the Qt layer, without starting Qt.

Policy:
- only ui/, the Qt timer factory and the desktop entrypoint may import PyQt5
- RosterWindow.__init__ builds widgets and connects signals; it must not load
  the roster (the entrypoint opens the session before showing the window)
"""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

QT_ALLOWED = {
    Path("services/autosave/qt_timer.py"),
    Path("casedesk/gui.py"),
}


def _imports_pyqt(path: Path) -> bool:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import) and any(a.name.startswith("PyQt5") for a in node.names):
            return True
        if isinstance(node, ast.ImportFrom) and (node.module or "").startswith("PyQt5"):
            return True
    return False


def _init_source(path: Path, class_name: str) -> str:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    for node in tree.body:
        if isinstance(node, ast.ClassDef) and node.name == class_name:
            for item in node.body:
                if isinstance(item, ast.FunctionDef) and item.name == "__init__":
                    return ast.get_source_segment(path.read_text(encoding="utf-8"), item) or ""
    return ""


def test_pyqt_stays_in_the_ui_layer():
    offenders = []
    for layer in ("app", "core", "services", "storage", "infra", "casedesk"):
        for path in (ROOT / layer).rglob("*.py"):
            rel = path.relative_to(ROOT)
            if rel in QT_ALLOWED:
                continue
            if _imports_pyqt(path):
                offenders.append(str(rel))
    assert offenders == []


def test_roster_window_init_does_not_load():
    block = _init_source(ROOT / "ui" / "roster_window.py", "RosterWindow")
    assert block
    assert ".open(" not in block
    assert ".reload(" not in block
    assert "run_until_complete(" not in block


def test_window_edits_go_through_the_session():
    src = (ROOT / "ui" / "roster_window.py").read_text(encoding="utf-8")
    assert "self.session.edit(" in src
    assert ".working." not in src
    assert ".baseline." not in src


def test_emptied_cells_are_sent_as_no_value():
    src = (ROOT / "ui" / "roster_window.py").read_text(encoding="utf-8")
    assert "normalize_scalar(item.text(), blank_as_none=True)" in src


def test_every_finished_batch_shows_its_report():
    tree = ast.parse((ROOT / "ui" / "roster_window.py").read_text(encoding="utf-8"))
    handler = None
    for node in ast.walk(tree):
        if isinstance(node, ast.Call) and getattr(node.func, "attr", "") == "subscribe":
            if node.args and getattr(node.args[0], "id", "") == "SaveFinished":
                handler = node.args[1]
    assert isinstance(handler, ast.Attribute)
    src = (ROOT / "ui" / "roster_window.py").read_text(encoding="utf-8")
    body = _method_source(src, handler.attr)
    assert "get_last_report()" in body
    assert "_warn_failures(" in body


def _method_source(src: str, name: str) -> str:
    tree = ast.parse(src)
    for node in ast.walk(tree):
        if isinstance(node, ast.FunctionDef) and node.name == name:
            return ast.get_source_segment(src, node) or ""
    return ""
