# -*- coding: utf-8 -*-
"""CLI smoke tests against a temporary JSON store."""

from __future__ import annotations

import argparse
import json

import pytest

from casedesk.cli import main, parse_assignment


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("CASEDESK_HOME", str(tmp_path / "home"))
    store = tmp_path / "store"
    store.mkdir()
    rows = [{"id": "s1", "fields": {"status": None}}, {"id": "s2", "fields": {"status": None}}]
    (store / "day1.json").write_text(json.dumps({"scope": "day1", "records": rows}), encoding="utf-8")
    return store


def test_parse_assignment_splits_on_last_dot():
    assert parse_assignment("2024.s1.status=Late") == ("2024.s1", "status", "Late")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_assignment("s1status=Late")


def test_cli_saves_edits(home, capsys):
    code = main(["--store", str(home), "--scope", "day1", "--attendance", "--set", "s1.status=Present", "--show"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Saved all 1 change" in out
    data = json.loads((home / "day1.json").read_text(encoding="utf-8"))
    assert data["records"][0]["fields"]["status"] == "Present"


def test_cli_reports_validation_failure(home, capsys):
    code = main(["--store", str(home), "--scope", "day1", "--attendance", "--set", "s2.status=Sick"])
    captured = capsys.readouterr()
    assert code == 1
    assert "Saved 0, failed 1" in captured.out
    assert "s2" in captured.err


def test_cli_unknown_record(home, capsys):
    code = main(["--store", str(home), "--scope", "day1", "--set", "zz.status=Late"])
    assert code == 2
    assert "not in the current roster" in capsys.readouterr().err
