# -*- coding: utf-8 -*-
"""Baseline and Working stores for one roster view.

Both hold defensive copies; callers never get a live reference to a stored
value. Only the save coordinator writes Baseline after a load.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from core.records import copy_value
from core.types import RecordId, RecordValue, Scalar
from services.errors import UnknownRecordError


class BaselineStore:
    """Last value known to be durably committed, per id."""

    def __init__(self) -> None:
        self._order: List[RecordId] = []
        self._values: Dict[RecordId, RecordValue] = {}

    def replace_all(self, order: Iterable[RecordId], values: Mapping[RecordId, Mapping[str, Scalar]]) -> None:
        self._order = list(order)
        self._values = {rid: copy_value(values.get(rid)) for rid in self._order}

    def clear(self) -> None:
        self._order = []
        self._values = {}

    @property
    def roster(self) -> Tuple[RecordId, ...]:
        return tuple(self._order)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._values

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[RecordId]:
        return iter(self._order)

    def get(self, record_id: RecordId) -> RecordValue:
        if record_id not in self._values:
            raise UnknownRecordError(record_id)
        return copy_value(self._values[record_id])

    def set(self, record_id: RecordId, value: Mapping[str, Scalar]) -> None:
        if record_id not in self._values:
            raise UnknownRecordError(record_id)
        self._values[record_id] = copy_value(value)


class WorkingStore(BaselineStore):
    """The user's current values. ``epoch`` moves on every whole-roster reset."""

    def __init__(self) -> None:
        super().__init__()
        self.epoch = 0

    def replace_all(self, order, values) -> None:
        super().replace_all(order, values)
        self.epoch += 1

    def set_field(self, record_id: RecordId, field: str, value: Scalar) -> RecordValue:
        current = self.get(record_id)
        current[str(field)] = value
        self._values[record_id] = current
        return copy_value(current)

    def field(self, record_id: RecordId, field: str) -> Optional[Scalar]:
        return self.get(record_id).get(field)

    def reset_from(self, baseline: BaselineStore, ids: Optional[Iterable[RecordId]] = None) -> int:
        """Copy Baseline over Working; all ids when ``ids`` is None."""
        if ids is None:
            self.replace_all(baseline.roster, {rid: baseline.get(rid) for rid in baseline.roster})
            return len(self)
        n = 0
        for rid in ids:
            self.set(rid, baseline.get(rid))
            n += 1
        return n
