# -*- coding: utf-8 -*-
"""
Application bootstrap (runs before any roster is opened):
- Init logging
- Load per-user settings
"""
from __future__ import annotations

from typing import Any, Dict

from infra.logging_setup import init_logging, init_perf_logging
from infra.perf import is_enabled as perf_enabled
from infra.settings import load_settings


def bootstrap() -> Dict[str, Any]:
    init_logging()
    if perf_enabled():
        init_perf_logging()
    return load_settings()
