# -*- coding: utf-8 -*-
"""Desktop entrypoint: one roster scope of a JSON store in a table window.

    casedesk-gui --scope 2024-05-06 [--store ./data] [--attendance]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

try:
    from PyQt5.QtWidgets import QMessageBox
except Exception:  # pragma: no cover - optional dependency pre-check
    QMessageBox = None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="casedesk-gui", description="Edit a roster in a window.")
    p.add_argument("--store", help="store folder (default: per-user stores folder)")
    p.add_argument("--scope", required=True, help="roster scope, e.g. a date or a table page")
    p.add_argument("--attendance", action="store_true", help="attendance sheet (always editable)")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    from app.deps import ensure_runtime_deps

    try:
        ensure_runtime_deps()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)

    from PyQt5.QtWidgets import QApplication

    from app.bootstrap import bootstrap
    from app.roster_session import RosterSession
    from core.attendance import attendance_schema
    from core.records import DEFAULT_SCHEMA
    from infra.crash_handler import install_global_exception_handlers
    from infra.paths import stores_dir
    from infra.settings import autosave_delay_ms
    from services.autosave.qt_timer import qt_timer_factory
    from services.errors import EngineError
    from storage.json_store import JsonFileRemoteStore
    from ui.async_pump import AsyncioPump
    from ui.roster_window import RosterWindow

    settings = bootstrap()
    app = QApplication(sys.argv[:1])
    pump = AsyncioPump()
    install_global_exception_handlers(pump.loop)

    session = RosterSession(
        JsonFileRemoteStore(args.store or stores_dir()),
        schema=attendance_schema() if args.attendance else DEFAULT_SCHEMA,
        autosave_delay_ms=autosave_delay_ms(settings),
        timer_factory=qt_timer_factory(pump),
        block_navigation_while_saving=bool(settings.get("block_navigation_while_saving")),
        start_editing=args.attendance,
        loop=pump.loop,
        time_format=str(settings.get("status_time_format") or "%H:%M"),
    )
    window = RosterWindow(session, pump)
    try:
        pump.run_until_complete(session.open(args.scope))
    except (EngineError, OSError, ValueError) as exc:
        QMessageBox.critical(None, "casedesk", f"Could not open roster {args.scope!r}.\n\n{exc}")
        pump.close()
        return 2

    window.setWindowTitle(f"casedesk - {args.scope}")
    window.resize(720, 480)
    window.show()
    code = app.exec_()
    session.close()
    pump.close()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
