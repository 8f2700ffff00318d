# -*- coding: utf-8 -*-
"""
Centralized path resolver for per-user writable data (no admin required).
"""
from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "casedesk"


def user_data_dir() -> Path:
    """
    Per-user writable directory. CASEDESK_HOME wins, then LOCALAPPDATA
    (non-roaming), then XDG_DATA_HOME, then the home folder.
    """
    override = os.getenv("CASEDESK_HOME")
    if override:
        p = Path(override)
    else:
        base = os.getenv("LOCALAPPDATA") or os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
        p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p


def ensure_dir(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p


def logs_dir() -> Path:
    return ensure_dir(user_data_dir() / "logs")


def stores_dir() -> Path:
    return ensure_dir(user_data_dir() / "stores")
