# -*- coding: utf-8 -*-
"""JSON file store and a full session round-trip against it."""

from __future__ import annotations

import asyncio
import json

import pytest

from app.roster_session import RosterSession
from core.keys import StoreKeys as K
from storage.json_store import JsonFileRemoteStore
from storage.remote_store import CommitRequest


def _write_roster(folder, scope, rows):
    path = folder / f"{scope}.json"
    path.write_text(json.dumps({K.SCOPE: scope, K.RECORDS: rows}), encoding="utf-8")
    return path


def test_load_and_upsert(tmp_path):
    path = _write_roster(tmp_path, "grade3", [{"id": "a", "fields": {"status": None, "name": "Ana"}}])
    store = JsonFileRemoteStore(tmp_path)

    async def scenario():
        seeds = await store.load_roster("grade3")
        results = await store.commit([CommitRequest("a", {"status": "Present"}), CommitRequest("b", {"status": "Late"})])
        return seeds, results

    seeds, results = asyncio.run(scenario())
    assert [s.id for s in seeds] == ["a"]
    assert all(r.ok for r in results)
    assert results[0].committed_value == {"status": "Present", "name": "Ana"}

    data = json.loads(path.read_text(encoding="utf-8"))
    rows = {row["id"]: row["fields"] for row in data[K.RECORDS]}
    assert rows == {"a": {"status": "Present", "name": "Ana"}, "b": {"status": "Late"}}
    assert K.UPDATED_AT in data


def test_missing_roster_is_empty(tmp_path):
    store = JsonFileRemoteStore(tmp_path)
    assert asyncio.run(store.load_roster("nothing-here")) == []


def test_malformed_roster_raises(tmp_path):
    (tmp_path / "bad.json").write_text("[]", encoding="utf-8")
    store = JsonFileRemoteStore(tmp_path)
    with pytest.raises(ValueError):
        asyncio.run(store.load_roster("bad"))


def test_commit_before_load_is_an_error(tmp_path):
    store = JsonFileRemoteStore(tmp_path)
    with pytest.raises(RuntimeError):
        asyncio.run(store.commit([CommitRequest("a", {})]))


def test_session_round_trip_persists_and_reloads(tmp_path):
    _write_roster(tmp_path, "2024-05-06", [{"id": f"s{i}", "fields": {"status": None}} for i in range(3)])

    async def scenario():
        s = RosterSession(JsonFileRemoteStore(tmp_path), start_editing=True, autosave_delay_ms=60_000)
        await s.open("2024-05-06")
        s.mark("s0", "status", "Present")
        s.mark("s2", "status", "Absent")
        result = await s.save_now()
        s.close()

        again = RosterSession(JsonFileRemoteStore(tmp_path))
        await again.open("2024-05-06")
        again.close()
        return result, again

    result, again = asyncio.run(scenario())
    assert result.counts() == {"succeeded": 2, "failed": 0}
    assert again.value("s0")["status"] == "Present"
    assert again.value("s1")["status"] is None
    assert again.value("s2")["status"] == "Absent"
