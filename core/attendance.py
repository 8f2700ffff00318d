# -*- coding: utf-8 -*-
"""Attendance roster shape (status marks per person for one date)."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional

from core.records import RecordSchema
from core.types import Scalar
from core.validators.records import one_of

STATUS_FIELD = "status"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    EXCUSED = "Excused"
    LATE = "Late"


def attendance_schema(*, extra_fields: Iterable[str] = ()) -> RecordSchema:
    fields = (STATUS_FIELD,) + tuple(extra_fields)
    return RecordSchema(
        fields=fields,
        validators=(one_of(STATUS_FIELD, (s.value for s in AttendanceStatus)),),
    )


def tally(values: Iterable[Optional[Mapping[str, Scalar]]], field: str = STATUS_FIELD) -> Dict[str, int]:
    """Count marks per status; records with no mark count as 'Unmarked'."""
    counts: Counter = Counter()
    total = 0
    for value in values:
        total += 1
        mark = (value or {}).get(field)
        if mark:
            counts[mark] += 1
    out = {s.value: int(counts.get(s.value, 0)) for s in AttendanceStatus}
    out["Unmarked"] = total - sum(counts.values())
    return out
