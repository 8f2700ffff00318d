# -*- coding: utf-8 -*-
"""casedesk version single source of truth."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

_DEFAULT_VERSION = "0.0.0"


def _installed_version() -> str:
    try:
        return version("casedesk")
    except PackageNotFoundError:
        return _DEFAULT_VERSION


__version__ = _installed_version()


def get_version() -> str:
    return __version__
