# -*- coding: utf-8 -*-
"""
User settings stored in a per-user writable folder.
Only known keys are honoured; unknown keys are kept on disk untouched.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from app import config
from infra.paths import user_data_dir

log = logging.getLogger(__name__)


def settings_file() -> Path:
    return user_data_dir() / "casedesk_settings.json"


def _defaults() -> Dict[str, Any]:
    return {
        "autosave_delay_ms": config.AUTOSAVE_DELAY_MS,
        "block_navigation_while_saving": config.BLOCK_NAVIGATION_WHILE_SAVING,
        "status_time_format": config.STATUS_TIME_FORMAT,
    }


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    defaults = _defaults()
    if not path.exists():
        save_settings(defaults.copy(), path)
        return defaults.copy()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        merged = defaults.copy()
        if isinstance(data, dict):
            merged.update({k: v for k, v in data.items() if v is not None})
        return merged
    except Exception:
        # Recover from corruption gracefully
        log.warning("Settings file %s is unreadable; restoring defaults", path, exc_info=True)
        save_settings(defaults.copy(), path)
        return defaults.copy()


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def autosave_delay_ms(settings: Dict[str, Any]) -> int:
    try:
        value = int(settings.get("autosave_delay_ms", config.AUTOSAVE_DELAY_MS))
    except (TypeError, ValueError):
        log.warning("Invalid autosave_delay_ms=%r; using default", settings.get("autosave_delay_ms"))
        return config.AUTOSAVE_DELAY_MS
    return max(value, 0)
