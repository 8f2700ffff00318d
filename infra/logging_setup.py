# -*- coding: utf-8 -*-
"""
Logging setup: engine events and tracebacks end up in user space.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from infra.paths import logs_dir

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def init_logging(filename: str = "casedesk.log", *, level: int = logging.INFO, log_dir: Optional[Path] = None) -> Path:
    log_path = (log_dir or logs_dir()) / filename
    # Don't add multiple handlers if init called twice
    root = logging.getLogger()
    if not any(isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == str(log_path) for h in root.handlers):
        logging.basicConfig(
            level=level,
            format=_FORMAT,
            handlers=[logging.FileHandler(log_path, encoding="utf-8"), logging.StreamHandler()],
        )
    return log_path


def init_perf_logging(filename: str = "perf.log", *, log_dir: Optional[Path] = None) -> Path:
    """Attach a dedicated file handler for performance timings.

    Save timings are emitted by infra.perf.span when CASEDESK_PERF=1.
    """
    log_path = (log_dir or logs_dir()) / filename
    logger = logging.getLogger("casedesk.perf")
    logger.setLevel(logging.INFO)
    # Avoid duplicate handlers
    if not any(isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == str(log_path) for h in logger.handlers):
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(fh)
    return log_path
