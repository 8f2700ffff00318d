# -*- coding: utf-8 -*-
"""Shared domain types (pure, test-friendly)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Mapping, Optional

RecordId = Hashable
Scalar = Optional[str]
RecordValue = Dict[str, Scalar]


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Issue:
    code: str
    message: str
    severity: Severity = Severity.WARNING
    context: Optional[str] = None

    @property
    def blocking(self) -> bool:
        return self.severity is Severity.ERROR


@dataclass(frozen=True)
class RecordSeed:
    """One roster entry as delivered by the roster supplier."""

    id: RecordId
    fields: Mapping[str, Scalar] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, id_key: str = "id") -> "RecordSeed":
        payload = dict(data)
        rid = payload.pop(id_key)
        return cls(id=rid, fields=payload)
