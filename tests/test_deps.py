# -*- coding: utf-8 -*-

import pytest

from app import deps


def test_missing_packages_reported(monkeypatch):
    def fake_import(name):
        raise ModuleNotFoundError(name)

    monkeypatch.setattr(deps, "import_module", fake_import)
    assert deps.missing_runtime_packages() == ["PyQt5"]
    with pytest.raises(RuntimeError, match="casedesk gui needs: PyQt5"):
        deps.ensure_runtime_deps()


def test_nothing_missing(monkeypatch):
    monkeypatch.setattr(deps, "import_module", lambda name: object())
    assert deps.missing_runtime_packages() == []
    deps.ensure_runtime_deps()


def test_features_without_packages_never_fail(monkeypatch):
    def fake_import(name):
        raise ModuleNotFoundError(name)

    monkeypatch.setattr(deps, "import_module", fake_import)
    assert deps.missing_runtime_packages("cli") == []
    deps.ensure_runtime_deps("cli")
