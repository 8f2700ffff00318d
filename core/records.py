# -*- coding: utf-8 -*-
"""Record values: structural comparison and normalisation (pure)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.types import Issue, RecordId, RecordValue, Scalar

FieldValidator = Callable[[RecordId, Mapping[str, Scalar]], List[Issue]]

NONE_SENTINEL = "__none__"


def normalize_scalar(value: object, *, blank_as_none: bool = False) -> Scalar:
    """Coerce an edited value to the record scalar type.

    Select widgets use ``"__none__"`` for "no value"; that maps to None.
    Enum members map to their value, anything else to its text, so a mark
    given as ``AttendanceStatus.PRESENT`` and one loaded as ``"Present"`` agree.
    ``blank_as_none`` treats an emptied text cell as "no value".
    """
    if isinstance(value, Enum):
        value = value.value
    if value is None or value == NONE_SENTINEL:
        return None
    if blank_as_none and value == "":
        return None
    return str(value)


def normalize_value(value: Optional[Mapping[str, object]]) -> RecordValue:
    """Normalise every field of a loaded or store-returned record."""
    return {str(k): normalize_scalar(v) for k, v in (value or {}).items()}


def copy_value(value: Optional[Mapping[str, Scalar]]) -> RecordValue:
    return {str(k): v for k, v in (value or {}).items()}


@dataclass(frozen=True)
class RecordSchema:
    """Shape of the records in one roster.

    fields:
        Tracked fields. Empty means "every key present on either side".
    linked_fields:
        Denormalised fields sourced from a related record. They are left out
        of the primary commit and written through a related writer instead.
    validators:
        Called before a record is dispatched; ERROR issues block the commit.
    """

    fields: Tuple[str, ...] = ()
    linked_fields: Tuple[str, ...] = ()
    validators: Tuple[FieldValidator, ...] = field(default_factory=tuple)

    def tracked(self, a: Mapping[str, Scalar], b: Mapping[str, Scalar]) -> Iterable[str]:
        if self.fields:
            return self.fields
        return set(a) | set(b)

    def primary_fields(self, value: Mapping[str, Scalar]) -> RecordValue:
        return {k: v for k, v in value.items() if k not in self.linked_fields}


DEFAULT_SCHEMA = RecordSchema()


def values_equal(
    a: Optional[Mapping[str, Scalar]],
    b: Optional[Mapping[str, Scalar]],
    schema: RecordSchema = DEFAULT_SCHEMA,
) -> bool:
    """Field-by-field equality. A missing field compares equal to None."""
    a = a or {}
    b = b or {}
    for name in schema.tracked(a, b):
        if a.get(name) != b.get(name):
            return False
    return True


def changed_fields(
    before: Optional[Mapping[str, Scalar]],
    after: Optional[Mapping[str, Scalar]],
    schema: RecordSchema = DEFAULT_SCHEMA,
) -> List[str]:
    before = before or {}
    after = after or {}
    return sorted(n for n in schema.tracked(before, after) if before.get(n) != after.get(n))


def merge_committed(
    snapshot: Mapping[str, Scalar],
    committed: Optional[Mapping[str, Scalar]],
) -> RecordValue:
    """Server-returned fields win over the dispatched snapshot."""
    out = copy_value(snapshot)
    if committed:
        out.update(normalize_value(committed))
    return out


def seeds_to_values(seeds: Sequence) -> Tuple[List[RecordId], Dict[RecordId, RecordValue]]:
    order: List[RecordId] = []
    values: Dict[RecordId, RecordValue] = {}
    for seed in seeds:
        if seed.id in values:
            continue
        order.append(seed.id)
        values[seed.id] = normalize_value(seed.fields)
    return order, values
