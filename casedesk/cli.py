# -*- coding: utf-8 -*-
"""Command line front for a JSON roster store.

    python -m casedesk --store ./data --scope 2024-05-06 \
        --set s1.status=Present --set s2.status=Late --show

Edits go through a RosterSession exactly as a screen would send them; one
batch save runs at the end and the exit code is 1 if any record failed.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence, Tuple

from app.bootstrap import bootstrap
from app.roster_session import RosterSession
from casedesk.version import __version__
from core.attendance import attendance_schema, tally
from core.records import DEFAULT_SCHEMA
from infra.crash_handler import install_global_exception_handlers
from infra.paths import stores_dir
from infra.settings import autosave_delay_ms
from services.errors import EngineError, PartialBatchFailure
from storage.json_store import JsonFileRemoteStore

log = logging.getLogger(__name__)


def parse_assignment(text: str) -> Tuple[str, str, str]:
    """``ID.FIELD=VALUE`` -> (id, field, value). The last dot splits id/field."""
    target, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ID.FIELD=VALUE, got {text!r}")
    record_id, dot, field = target.rpartition(".")
    if not dot or not record_id or not field:
        raise argparse.ArgumentTypeError(f"expected ID.FIELD=VALUE, got {text!r}")
    return record_id, field, value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="casedesk", description="Edit and save a roster held in a JSON store.")
    p.add_argument("--store", help="store folder (default: per-user stores folder)")
    p.add_argument("--scope", required=True, help="roster scope, e.g. a date or a table page")
    p.add_argument("--set", dest="assignments", action="append", default=[], type=parse_assignment,
                   metavar="ID.FIELD=VALUE", help="edit one field (repeatable)")
    p.add_argument("--attendance", action="store_true", help="validate the 'status' field as an attendance mark")
    p.add_argument("--show", action="store_true", help="print the roster after saving")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _print_roster(session: RosterSession, attendance: bool) -> None:
    for rid in session.roster:
        value = session.value(rid)
        flag = "*" if session.is_dirty(rid) else " "
        fields = ", ".join(f"{k}={v}" for k, v in sorted(value.items()))
        print(f"{flag} {rid}: {fields}")
    if attendance:
        counts = tally(session.value(rid) for rid in session.roster)
        print("  " + "  ".join(f"{k}: {v}" for k, v in counts.items()))


async def run(args: argparse.Namespace, *, delay_ms: int) -> int:
    store = JsonFileRemoteStore(args.store or stores_dir())
    session = RosterSession(
        store,
        schema=attendance_schema() if args.attendance else DEFAULT_SCHEMA,
        autosave_delay_ms=delay_ms,
        start_editing=True,
    )
    await session.open(args.scope)
    try:
        for record_id, field, value in args.assignments:
            session.edit(record_id, field, value)
        result = await session.save_now()
        print(result.summary())
        if args.show:
            _print_roster(session, args.attendance)
        result.raise_for_failures()
    except PartialBatchFailure as exc:
        for rid, reason in exc.result.failed.items():
            print(f"  failed {rid}: {reason}", file=sys.stderr)
        return 1
    finally:
        session.close()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = bootstrap()
    install_global_exception_handlers()
    try:
        return asyncio.run(run(args, delay_ms=autosave_delay_ms(settings)))
    except EngineError as exc:
        log.error("casedesk failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2
