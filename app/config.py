# -*- coding: utf-8 -*-
"""Build-time configuration.

This module is intentionally tiny and *import-safe*. Per-user overrides live
in ``infra.settings``; environment variables win over both for ops use.
"""

from __future__ import annotations

import os

# Quiet period after the last edit before an autosave cycle starts.
AUTOSAVE_DELAY_MS: int = 30_000

# Reference behaviour: a save in flight does not hold navigation back.
BLOCK_NAVIGATION_WHILE_SAVING: bool = False

# strftime format used by the "Saved at ..." status label.
STATUS_TIME_FORMAT: str = "%H:%M"

NAVIGATION_WARNING: str = "You have {count} unsaved {noun}. Leave this page and discard them?"


# --- Environment overrides (optional) ---
try:
    _ms = os.environ.get("CASEDESK_AUTOSAVE_MS")
    if _ms:
        AUTOSAVE_DELAY_MS = max(int(_ms), 0)
    _block = os.environ.get("CASEDESK_BLOCK_NAV_WHILE_SAVING")
    if _block:
        BLOCK_NAVIGATION_WHILE_SAVING = _block.strip().lower() in ("1", "true", "yes", "on")
except ValueError:
    # Never crash on config overrides.
    pass
