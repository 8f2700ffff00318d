# -*- coding: utf-8 -*-
"""Commit outcomes (per record and per batch)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Union

from core.types import RecordId, RecordValue
from services.errors import EngineError, PartialBatchFailure


@dataclass(frozen=True)
class Committed:
    record_id: RecordId
    value: RecordValue

    ok = True


@dataclass(frozen=True)
class Failed:
    record_id: RecordId
    reason: str
    error: Optional[EngineError] = None

    ok = False


Outcome = Union[Committed, Failed]


@dataclass(frozen=True)
class BatchResult:
    succeeded: FrozenSet[RecordId] = frozenset()
    failed: Dict[RecordId, str] = field(default_factory=dict)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total(self) -> int:
        return self.succeeded_count + self.failed_count

    @property
    def ok(self) -> bool:
        return not self.failed

    def counts(self) -> Dict[str, int]:
        return {"succeeded": self.succeeded_count, "failed": self.failed_count}

    def summary(self) -> str:
        if not self.total:
            return "Nothing to save"
        if self.ok:
            noun = "change" if self.succeeded_count == 1 else "changes"
            return f"Saved all {self.succeeded_count} {noun}"
        return f"Saved {self.succeeded_count}, failed {self.failed_count}"

    def raise_for_failures(self) -> None:
        if self.failed:
            raise PartialBatchFailure(self)

    @classmethod
    def from_outcomes(cls, outcomes) -> "BatchResult":
        ok = frozenset(o.record_id for o in outcomes if o.ok)
        bad = {o.record_id: o.reason for o in outcomes if not o.ok}
        return cls(succeeded=ok, failed=bad)
