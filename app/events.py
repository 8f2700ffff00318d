# -*- coding: utf-8 -*-
"""Simple event bus for session notifications (no UI dependency)."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Type


@dataclass(frozen=True)
class RosterLoaded:
    scope: Any
    count: int


@dataclass(frozen=True)
class RecordEdited:
    record_id: Any
    field: str
    value: Optional[str] = None


@dataclass(frozen=True)
class SaveStarted:
    ids: frozenset
    reason: str = "manual"
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SaveFinished:
    result: Any
    reason: str = "manual"
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RecordSaveFailed:
    record_id: Any
    reason: str


@dataclass(frozen=True)
class ModeChanged:
    mode: Any
    previous: Any


@dataclass(frozen=True)
class ChangesDiscarded:
    count: int


class EventBus:
    """Minimal in-process event bus (best-effort)."""

    def __init__(self) -> None:
        self._subs: Dict[Type[Any], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        self._subs.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        subs = self._subs.get(event_type) or []
        if callback in subs:
            subs.remove(callback)

    def emit(self, event: Any) -> None:
        for cb in list(self._subs.get(type(event), []) or []):
            try:
                cb(event)
            except Exception:
                # Best-effort: never break the save flow for a listener
                logging.getLogger(__name__).debug("Event handler failed.", exc_info=True)
