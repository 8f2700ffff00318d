# -*- coding: utf-8 -*-
"""Save coordinator: commits Working snapshots and reconciles Baseline.

One commit cycle at a time (global lock expressed as ``SaveState.SAVING``).
A batch is best-effort: every record is committed independently and the
batch reports how many landed. Only this module writes Baseline after a load.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from app.dirty_tracker import DirtyTracker
from app.events import EventBus, RecordSaveFailed, SaveFinished, SaveStarted
from app.record_stores import BaselineStore, WorkingStore
from core.records import copy_value, merge_committed, values_equal
from core.types import RecordId, RecordValue
from infra.perf import span
from services.errors import CommitError, SaveInProgressError, UnknownRecordError, ValidationError
from services.outcomes import BatchResult, Committed, Failed, Outcome
from services.validation_service import ValidationService
from storage.remote_store import CommitRequest, RelatedWriter, RemoteStore

log = logging.getLogger(__name__)


class SaveState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    SAVING = "saving"


@dataclass(frozen=True)
class _Dispatch:
    record_id: RecordId
    snapshot: RecordValue
    before: RecordValue
    generation: int
    epoch: int


class SaveCoordinator:
    def __init__(
        self,
        baseline: BaselineStore,
        working: WorkingStore,
        tracker: DirtyTracker,
        remote: RemoteStore,
        *,
        validation: Optional[ValidationService] = None,
        related_writers: Optional[Mapping[str, RelatedWriter]] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._baseline = baseline
        self._working = working
        self._tracker = tracker
        self._remote = remote
        self._schema = tracker.schema
        self._validation = validation or ValidationService(self._schema)
        self._writers: Dict[str, RelatedWriter] = dict(related_writers or {})
        missing = [f for f in self._schema.linked_fields if f not in self._writers]
        if missing:
            raise ValueError(f"No related writer for linked field(s): {', '.join(missing)}")
        self._bus = event_bus
        self._clock = clock
        self._state = SaveState.IDLE
        self._scheduled = False
        self._reason = ""
        self._generation = 0
        self.last_saved_at: Optional[float] = None
        self.last_result: Optional[BatchResult] = None

    # --------- state ---------
    @property
    def state(self) -> SaveState:
        return self._state

    @property
    def persisting(self) -> bool:
        return self._state is SaveState.SAVING

    @property
    def current_reason(self) -> str:
        return self._reason if self.persisting else ""

    @property
    def generation(self) -> int:
        return self._generation

    def set_scheduled(self, scheduled: bool) -> None:
        """Autosave timer armed/disarmed; SAVING takes precedence."""
        self._scheduled = bool(scheduled)
        if not self.persisting:
            self._state = SaveState.SCHEDULED if self._scheduled else SaveState.IDLE

    def invalidate(self) -> None:
        """The roster was reloaded or closed: in-flight results must not land."""
        self._generation += 1
        self.last_result = None

    # --------- commits ---------
    async def save_one(self, record_id: RecordId, *, reason: str = "manual") -> Outcome:
        outcomes = await self._run([record_id], reason=reason)
        return outcomes[0]

    async def save_all(self, ids: Iterable[RecordId], *, reason: str = "manual") -> BatchResult:
        ordered = list(dict.fromkeys(ids))
        if not ordered:
            return BatchResult()
        outcomes = await self._run(ordered, reason=reason)
        return BatchResult.from_outcomes(outcomes)

    async def _run(self, ids: List[RecordId], *, reason: str) -> List[Outcome]:
        if self.persisting:
            raise SaveInProgressError(f"A save is already running ({self._reason}).")
        for rid in ids:
            if rid not in self._baseline:
                raise UnknownRecordError(rid)

        dispatches = [
            _Dispatch(
                record_id=rid,
                snapshot=self._working.get(rid),
                before=self._baseline.get(rid),
                generation=self._generation,
                epoch=self._working.epoch,
            )
            for rid in ids
        ]

        self._state = SaveState.SAVING
        self._reason = reason
        self._emit(SaveStarted(ids=frozenset(ids), reason=reason))
        log.info("Save started reason=%s records=%d", reason, len(ids))
        try:
            with span("save", reason=reason, records=len(ids)):
                outcomes = list(await asyncio.gather(*(self._commit_record(d) for d in dispatches)))
        finally:
            self._state = SaveState.SCHEDULED if self._scheduled else SaveState.IDLE
            self._reason = ""

        result = BatchResult.from_outcomes(outcomes)
        if dispatches[0].generation == self._generation:
            self.last_result = result
            if result.succeeded:
                self.last_saved_at = self._clock()
        for o in outcomes:
            if not o.ok:
                log.warning("Save failed for %r: %s", o.record_id, o.reason)
                self._emit(RecordSaveFailed(record_id=o.record_id, reason=o.reason))
        log.info("Save finished reason=%s: %s", reason, result.summary())
        self._emit(SaveFinished(result=result, reason=reason))
        return outcomes

    async def _commit_record(self, d: _Dispatch) -> Outcome:
        rid = d.record_id
        try:
            self._validation.check(rid, d.snapshot)
        except ValidationError as exc:
            return Failed(rid, str(exc), exc)

        primary = self._schema.primary_fields(d.snapshot)
        try:
            results = await self._remote.commit([CommitRequest(id=rid, fields=primary)])
        except Exception as exc:
            log.debug("commit raised for %r", rid, exc_info=True)
            err = CommitError(rid, str(exc) or type(exc).__name__, cause=exc)
            return Failed(rid, err.reason, err)

        result = next((r for r in results or [] if r.id == rid), None)
        if result is None:
            err = CommitError(rid, "no outcome returned by the store")
            return Failed(rid, err.reason, err)
        if not result.ok:
            err = CommitError(rid, result.error or "rejected by the store")
            return Failed(rid, err.reason, err)

        committed = merge_committed(d.snapshot, result.committed_value)
        secondary_errors = await self._commit_linked(d, committed)

        if d.generation != self._generation:
            log.debug("Discarding stale commit result for %r (gen %s != %s)", rid, d.generation, self._generation)
        else:
            self._reconcile(d, committed, secondary_errors)

        if secondary_errors:
            field, exc = next(iter(secondary_errors.items()))
            err = CommitError(rid, f"linked field '{field}' was not saved: {exc}", cause=exc)
            return Failed(rid, err.reason, err)
        return Committed(rid, copy_value(committed))

    async def _commit_linked(self, d: _Dispatch, committed: RecordValue) -> Dict[str, BaseException]:
        """Write changed linked fields into ``committed``.

        The primary commit never carries linked fields, so whatever the store
        echoed for them is stale: a written field takes the new value, a failed
        one keeps its old baseline value.
        """
        errors: Dict[str, BaseException] = {}
        for field in self._schema.linked_fields:
            new, old = d.snapshot.get(field), d.before.get(field)
            if new == old:
                committed[field] = old
                continue
            try:
                await self._writers[field](d.record_id, new, old)
            except Exception as exc:
                log.error("Linked field %r of %r failed: %s", field, d.record_id, exc)
                errors[field] = exc
                committed[field] = old
            else:
                committed[field] = new
        return errors

    def _reconcile(self, d: _Dispatch, committed: RecordValue, secondary_errors: Mapping[str, Any]) -> None:
        rid = d.record_id
        self._baseline.set(rid, committed)

        current = self._working.get(rid)
        untouched = values_equal(current, d.snapshot, self._schema)
        discarded = d.epoch != self._working.epoch and values_equal(current, d.before, self._schema)
        if not (untouched or discarded):
            # Edited again while in flight: keep the newer value dirty.
            return
        new_working = copy_value(committed)
        if untouched:
            for field in secondary_errors:
                new_working[field] = d.snapshot.get(field)
        self._working.set(rid, new_working)

    def _emit(self, event: Any) -> None:
        if self._bus is not None:
            self._bus.emit(event)
