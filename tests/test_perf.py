# -*- coding: utf-8 -*-
"""Save timings are recorded only when CASEDESK_PERF is on."""

from __future__ import annotations

import asyncio

import pytest

from app.roster_session import RosterSession
from infra import perf


@pytest.fixture(autouse=True)
def _fresh_timings():
    perf.clear_timings()
    yield
    perf.clear_timings()


def _save_one_edit(store):
    async def scenario():
        s = RosterSession(store, start_editing=True, autosave_delay_ms=60_000)
        await s.open("2024-05-06")
        s.edit("s1", "status", "Present")
        await s.save_now()
        s.close()

    asyncio.run(scenario())


def test_disabled_records_nothing(store, monkeypatch):
    monkeypatch.delenv("CASEDESK_PERF", raising=False)
    _save_one_edit(store)
    assert perf.recent_timings() == []


def test_enabled_records_each_save_cycle(store, monkeypatch, caplog):
    monkeypatch.setenv("CASEDESK_PERF", "1")
    with caplog.at_level("INFO", logger="casedesk.perf"):
        _save_one_edit(store)

    timings = perf.recent_timings()
    assert len(timings) == 1
    assert timings[0].label == "save"
    assert timings[0].fields == {"reason": "manual", "records": 1}
    assert timings[0].elapsed_ms >= 0.0
    assert "PERF save reason=manual records=1" in caplog.text


def test_threshold_hides_fast_cycles_from_the_log(monkeypatch, caplog):
    monkeypatch.setenv("CASEDESK_PERF", "yes")
    monkeypatch.setenv("CASEDESK_PERF_MIN_MS", "100000")
    with caplog.at_level("INFO", logger="casedesk.perf"):
        with perf.span("save", reason="autosave", records=2) as timing:
            pass

    assert timing is not None
    assert perf.recent_timings() == [timing]
    assert "PERF" not in caplog.text
