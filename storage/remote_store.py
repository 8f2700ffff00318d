# -*- coding: utf-8 -*-
"""Remote persistence contract consumed by the save coordinator.

The store is an idempotent upsert keyed by record id. ``commit`` accepts
partial batches and answers one result per input id.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Set

from core.keys import CommitStatus, StoreKeys as K
from core.records import copy_value
from core.types import RecordId, RecordSeed, RecordValue, Scalar

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitRequest:
    id: RecordId
    fields: Mapping[str, Scalar]

    def to_dict(self) -> Dict[str, Any]:
        return {K.ID: self.id, K.FIELDS: dict(self.fields)}


@dataclass(frozen=True)
class CommitResult:
    id: RecordId
    status: str = CommitStatus.OK
    committed_value: Optional[RecordValue] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == CommitStatus.OK

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommitResult":
        return cls(
            id=data[K.ID],
            status=str(data.get(K.STATUS) or CommitStatus.ERROR),
            committed_value=data.get(K.COMMITTED_VALUE),
            error=data.get(K.ERROR),
        )


class RemoteStore(Protocol):
    async def load_roster(self, scope: Any) -> List[RecordSeed]:
        ...

    async def commit(self, records: List[CommitRequest]) -> List[CommitResult]:
        ...


class RelatedWriter(Protocol):
    async def __call__(self, record_id: RecordId, new_value: Scalar, old_value: Scalar) -> None:
        ...


@dataclass
class InMemoryRemoteStore:
    """Dict-backed store with failure injection (tests, demos).

    fail_ids:
        ids answered with an ``error`` status.
    raise_ids:
        ids for which ``commit`` raises (simulates a transport failure).
    latency:
        seconds awaited inside each commit, so callers really suspend.
    gate:
        when set, every commit waits for this event before answering.
    """

    rosters: Dict[Any, List[RecordId]] = field(default_factory=dict)
    records: Dict[RecordId, RecordValue] = field(default_factory=dict)
    fail_ids: Set[RecordId] = field(default_factory=set)
    raise_ids: Set[RecordId] = field(default_factory=set)
    latency: float = 0.0
    gate: Optional[asyncio.Event] = None
    calls: List[List[RecordId]] = field(default_factory=list)

    def seed(self, scope: Any, rows: Iterable[RecordSeed]) -> None:
        ids = []
        for row in rows:
            ids.append(row.id)
            self.records[row.id] = copy_value(row.fields)
        self.rosters[scope] = ids

    async def load_roster(self, scope: Any) -> List[RecordSeed]:
        ids = self.rosters.get(scope, [])
        return [RecordSeed(id=rid, fields=copy_value(self.records.get(rid))) for rid in ids]

    async def commit(self, records: List[CommitRequest]) -> List[CommitResult]:
        self.calls.append([r.id for r in records])
        if self.gate is not None:
            await self.gate.wait()
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)
        for req in records:
            if req.id in self.raise_ids:
                raise ConnectionError(f"commit of {req.id!r} failed")
        out: List[CommitResult] = []
        for req in records:
            if req.id in self.fail_ids:
                out.append(CommitResult(id=req.id, status=CommitStatus.ERROR, error="rejected by store"))
                continue
            current = dict(self.records.get(req.id) or {})
            current.update(copy_value(req.fields))
            self.records[req.id] = current
            out.append(CommitResult(id=req.id, committed_value=copy_value(current)))
        return out
