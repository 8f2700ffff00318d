# -*- coding: utf-8 -*-
"""RosterSession: the edit/save engine for one open roster view.

This is the boundary the presentation layer talks to. It owns the
Baseline/Working stores, the dirty tracker, the autosave scheduler, the save
coordinator, the edit-mode state machine and the navigation guard, and wires
them in this order:

    edit -> Working -> dirty recompute -> autosave (re)armed
         -> timer or save_now() -> coordinator commits the dirty subset
         -> per-record success moves Baseline; failures stay dirty

Keep this module free of PyQt imports.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Tuple

from app import config
from app.dirty_tracker import DirtyTracker
from app.events import ChangesDiscarded, EventBus, RecordEdited, RosterLoaded
from app.mode_controller import Mode, ModeController
from app.navigation_guard import NavigationGuard
from app.record_stores import BaselineStore, WorkingStore
from core.records import DEFAULT_SCHEMA, RecordSchema, normalize_scalar, seeds_to_values
from core.types import RecordId, RecordValue
from services.autosave.scheduler_core import AutosaveScheduler, TimerFactory
from services.errors import EditNotAllowedError, SaveInProgressError, UnknownRecordError
from services.outcomes import BatchResult, Outcome
from services.save_coordinator import SaveCoordinator
from services.validation_service import ValidationService
from storage.remote_store import RelatedWriter, RemoteStore

log = logging.getLogger(__name__)


class StatusKind(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    AUTOSAVING = "autosaving"
    UNSAVED = "unsaved"
    SAVED = "saved"


class RosterSession:
    """Edit/save engine for one roster view instance.

    Parameters
    ----------
    remote:
        Roster supplier and commit target (see storage.remote_store).
    schema:
        Tracked/linked fields and validators of the records.
    related_writers:
        One async writer per linked field of ``schema``.
    autosave_delay_ms:
        Quiet period before autosave (defaults to app.config).
    timer_factory:
        Timer backend for autosave; asyncio ``call_later`` by default.
    loop:
        Loop that runs autosave tasks when the timer fires outside of it
        (Qt timers). Defaults to the running loop.
    start_editing:
        Enter edit mode as soon as the roster is loaded (attendance sheets
        are always editable; tables start read-only).
    """

    def __init__(
        self,
        remote: RemoteStore,
        *,
        schema: RecordSchema = DEFAULT_SCHEMA,
        related_writers: Optional[Mapping[str, RelatedWriter]] = None,
        autosave_delay_ms: Optional[int] = None,
        timer_factory: Optional[TimerFactory] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        block_navigation_while_saving: Optional[bool] = None,
        start_editing: bool = False,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
        time_format: str = config.STATUS_TIME_FORMAT,
    ) -> None:
        self.remote = remote
        self.bus = event_bus or EventBus()
        self.baseline = BaselineStore()
        self.working = WorkingStore()
        self.tracker = DirtyTracker(self.baseline, self.working, schema)
        self.validation = ValidationService(schema)
        self.coordinator = SaveCoordinator(
            self.baseline,
            self.working,
            self.tracker,
            remote,
            validation=self.validation,
            related_writers=related_writers,
            event_bus=self.bus,
            clock=clock,
        )
        self.scheduler = AutosaveScheduler(
            self._on_autosave_timer,
            delay_ms=config.AUTOSAVE_DELAY_MS if autosave_delay_ms is None else autosave_delay_ms,
            timer_factory=timer_factory,
            on_armed_changed=self.coordinator.set_scheduled,
        )
        self.mode = ModeController(
            self.tracker.has_any_dirty,
            self._discard_all,
            on_exit_edit=self.scheduler.cancel,
            event_bus=self.bus,
        )
        self.guard = NavigationGuard(
            self.tracker.dirty_count,
            lambda: self.coordinator.persisting,
            block_while_saving=(
                config.BLOCK_NAVIGATION_WHILE_SAVING
                if block_navigation_while_saving is None
                else block_navigation_while_saving
            ),
        )
        self._loop = loop
        self._start_editing = bool(start_editing)
        self._time_format = time_format
        self._scope: Any = None
        self._loaded = False
        self._closed = False
        self._edited_during_save = False
        self.autosave_task: Optional[asyncio.Task] = None

    # --------- lifecycle ---------
    @property
    def scope(self) -> Any:
        return self._scope

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self, scope: Any) -> None:
        self._ensure_open()
        seeds = await self.remote.load_roster(scope)
        self._load(scope, seeds)

    async def reload(self) -> None:
        """Replace Baseline and Working wholesale from the store."""
        if not self._loaded:
            raise RuntimeError("open() must be called before reload()")
        await self.open(self._scope)

    def _load(self, scope: Any, seeds) -> None:
        order, values = seeds_to_values(seeds)
        self.coordinator.invalidate()
        self.scheduler.cancel()
        with self.tracker.suspend_tracking():
            self.baseline.replace_all(order, values)
            self.working.reset_from(self.baseline)
        self._scope = scope
        self._loaded = True
        log.info("Roster loaded scope=%s records=%d", scope, len(order))
        self.bus.emit(RosterLoaded(scope=scope, count=len(order)))
        if self._start_editing and self.mode.mode is Mode.READ_ONLY:
            self.mode.enter_edit()

    def close(self) -> None:
        """Teardown: no timer fires afterwards and in-flight results are dropped."""
        if self._closed:
            return
        self.scheduler.close()
        self.coordinator.invalidate()
        self._closed = True
        if self.tracker.has_any_dirty():
            log.warning("Roster %s closed with %d unsaved change(s)", self._scope, self.tracker.dirty_count())

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Roster session is closed")

    # --------- reads ---------
    @property
    def roster(self) -> Tuple[RecordId, ...]:
        return self.baseline.roster

    def value(self, record_id: RecordId) -> RecordValue:
        return self.working.get(record_id)

    def baseline_value(self, record_id: RecordId) -> RecordValue:
        return self.baseline.get(record_id)

    def is_dirty(self, record_id: RecordId) -> bool:
        return self.tracker.is_dirty(record_id)

    def dirty_ids(self):
        return self.tracker.dirty_ids()

    def dirty_fields(self, record_id: RecordId) -> List[str]:
        return self.tracker.dirty_fields(record_id)

    def get_dirty_count(self) -> int:
        return self.tracker.dirty_count()

    @property
    def persisting(self) -> bool:
        return self.coordinator.persisting

    @property
    def status(self) -> StatusKind:
        if self.coordinator.persisting:
            if self.coordinator.current_reason == "autosave":
                return StatusKind.AUTOSAVING
            return StatusKind.SAVING
        if self.tracker.has_any_dirty():
            return StatusKind.UNSAVED
        if self.coordinator.last_saved_at is not None:
            return StatusKind.SAVED
        return StatusKind.IDLE

    def get_status_label(self) -> str:
        kind = self.status
        if kind is StatusKind.AUTOSAVING:
            return "Autosaving..."
        if kind is StatusKind.SAVING:
            return "Saving..."
        if kind is StatusKind.UNSAVED:
            n = self.tracker.dirty_count()
            return f"{n} unsaved change{'' if n == 1 else 's'}"
        if kind is StatusKind.SAVED:
            stamp = time.strftime(self._time_format, time.localtime(self.coordinator.last_saved_at))
            return f"Saved at {stamp}"
        return "All changes saved"

    @property
    def last_report(self) -> Optional[BatchResult]:
        return self.coordinator.last_result

    def get_last_report(self) -> Optional[str]:
        result = self.coordinator.last_result
        return result.summary() if result is not None else None

    # --------- edits ---------
    def edit(self, record_id: RecordId, field: str, value: Any) -> None:
        self._check_editable(record_id)
        scalar = normalize_scalar(value)
        self.working.set_field(record_id, field, scalar)
        self.bus.emit(RecordEdited(record_id=record_id, field=field, value=scalar))
        self._after_mutation()

    def mark(self, record_id: RecordId, field: str, value: Any) -> None:
        """Toggle a mark: marking the value already set clears it."""
        self._check_editable(record_id)
        scalar = normalize_scalar(value)
        current = self.working.field(record_id, field)
        self.edit(record_id, field, None if current == scalar else scalar)

    def mark_all(self, field: str, value: Any) -> None:
        self._check_editable()
        scalar = normalize_scalar(value)
        for rid in self.roster:
            self.working.set_field(rid, field, scalar)
            self.bus.emit(RecordEdited(record_id=rid, field=field, value=scalar))
        self._after_mutation()

    def revert(self, record_id: RecordId) -> None:
        self._check_editable(record_id)
        self.working.set(record_id, self.baseline.get(record_id))
        self._after_mutation()

    def _check_editable(self, record_id: Optional[RecordId] = None) -> None:
        self._ensure_open()
        if not self.mode.edits_allowed:
            raise EditNotAllowedError(f"Edits are not allowed in {self.mode.mode.value} mode")
        if record_id is not None and record_id not in self.working:
            raise UnknownRecordError(record_id)

    def _after_mutation(self) -> None:
        if self.coordinator.persisting:
            self._edited_during_save = True
        if self.tracker.has_any_dirty():
            self.scheduler.notify_changed()
        else:
            self.scheduler.cancel()

    # --------- saves ---------
    def _on_autosave_timer(self) -> None:
        if self.coordinator.persisting:
            log.debug("Autosave skipped: a save is in flight")
            return
        ids = self.tracker.dirty_ordered()
        if not ids:
            log.debug("Autosave skipped: nothing dirty")
            return
        loop = self._loop or asyncio.get_running_loop()
        self.autosave_task = loop.create_task(self._autosave(ids))

    async def _autosave(self, ids: List[RecordId]) -> Optional[BatchResult]:
        try:
            return await self.coordinator.save_all(ids, reason="autosave")
        except SaveInProgressError:
            log.debug("Autosave rejected: a save is in flight")
            return None
        finally:
            self._after_save()

    async def save_now(self) -> BatchResult:
        """Commit every dirty record now (best-effort batch)."""
        self._ensure_open()
        ids = self.tracker.dirty_ordered()
        if not ids:
            return BatchResult()
        if self.coordinator.persisting:
            raise SaveInProgressError("A save is already running.")
        self.scheduler.cancel()
        try:
            return await self.coordinator.save_all(ids, reason="manual")
        finally:
            self._after_save()

    async def save_one(self, record_id: RecordId) -> Outcome:
        self._ensure_open()
        if self.coordinator.persisting:
            raise SaveInProgressError("A save is already running.")
        try:
            return await self.coordinator.save_one(record_id, reason="manual")
        finally:
            self._after_save()

    async def wait_idle(self) -> None:
        """Wait for a pending autosave cycle, if any, to settle."""
        task = self.autosave_task
        if task is not None and not task.done():
            await asyncio.wait([task])

    def _after_save(self) -> None:
        if self.coordinator.persisting:
            return
        edited, self._edited_during_save = self._edited_during_save, False
        # Edits that landed mid-commit get their own cycle; failures wait for the user.
        if edited and not self._closed and self.tracker.has_any_dirty() and not self.scheduler.pending:
            self.scheduler.arm()

    # --------- mode ---------
    def toggle_mode(self) -> Mode:
        mode = self.mode.toggle()
        if mode is Mode.CONFIRM_DISCARD:
            self.scheduler.cancel()
        return mode

    def enter_edit(self) -> None:
        self.mode.enter_edit()

    def request_exit(self) -> Mode:
        mode = self.mode.request_exit()
        if mode is Mode.CONFIRM_DISCARD:
            self.scheduler.cancel()
        return mode

    def confirm_discard(self) -> None:
        self.mode.confirm_discard()

    def cancel_exit(self) -> None:
        self.mode.cancel_exit()
        if self.tracker.has_any_dirty():
            self.scheduler.notify_changed()

    def _discard_all(self) -> None:
        count = self.tracker.dirty_count()
        self.working.reset_from(self.baseline)
        self.scheduler.cancel()
        log.info("Discarded %d unsaved change(s)", count)
        self.bus.emit(ChangesDiscarded(count=count))

    # --------- navigation ---------
    def check_navigation(self) -> Optional[str]:
        return self.guard.check()

    def confirm_leave(self, prompt: Callable[[str], bool]) -> bool:
        return self.guard.confirm_leave(prompt)
