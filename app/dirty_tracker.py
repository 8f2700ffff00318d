# -*- coding: utf-8 -*-
from __future__ import annotations

from contextlib import contextmanager
from typing import FrozenSet, List

from app.record_stores import BaselineStore, WorkingStore
from core.records import DEFAULT_SCHEMA, RecordSchema, changed_fields, values_equal
from core.types import RecordId


class DirtyTracker:
    """Unsaved-changes state derived from Baseline vs Working (UI-agnostic).

    Nothing is cached: every query compares the two stores field by field, so
    an edit reverted by hand is clean again.
    """

    def __init__(self, baseline: BaselineStore, working: WorkingStore, schema: RecordSchema = DEFAULT_SCHEMA) -> None:
        self._baseline = baseline
        self._working = working
        self.schema = schema
        self._suspend_depth = 0

    @property
    def suspended(self) -> bool:
        return bool(self._suspend_depth > 0)

    def is_dirty(self, record_id: RecordId) -> bool:
        if self.suspended:
            return False
        if record_id not in self._baseline or record_id not in self._working:
            return False
        return not values_equal(self._baseline.get(record_id), self._working.get(record_id), self.schema)

    def dirty_ids(self) -> FrozenSet[RecordId]:
        return frozenset(rid for rid in self._baseline.roster if self.is_dirty(rid))

    def dirty_ordered(self) -> List[RecordId]:
        return [rid for rid in self._baseline.roster if self.is_dirty(rid)]

    def has_any_dirty(self) -> bool:
        return any(self.is_dirty(rid) for rid in self._baseline.roster)

    def dirty_count(self) -> int:
        return len(self.dirty_ids())

    def dirty_fields(self, record_id: RecordId) -> List[str]:
        if record_id not in self._baseline or record_id not in self._working:
            return []
        return changed_fields(self._baseline.get(record_id), self._working.get(record_id), self.schema)

    def suspend(self) -> None:
        self._suspend_depth += 1

    def resume(self) -> None:
        if self._suspend_depth > 0:
            self._suspend_depth -= 1

    @contextmanager
    def suspend_tracking(self):
        """Report everything clean while a roster is being (re)loaded."""
        self.suspend()
        try:
            yield
        finally:
            self.resume()
