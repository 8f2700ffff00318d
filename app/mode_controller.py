# -*- coding: utf-8 -*-
"""Edit-mode state machine.

READ_ONLY -> EDITING -> (clean) READ_ONLY
                     -> (dirty) CONFIRM_DISCARD -> READ_ONLY (discard)
                                                -> EDITING   (cancel)

CONFIRM_DISCARD is a sub-state of editing: the roster is still in edit mode
while the user decides, but no edits are accepted.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from app.events import EventBus, ModeChanged
from services.errors import InvalidTransitionError

log = logging.getLogger(__name__)


class Mode(Enum):
    READ_ONLY = "read_only"
    EDITING = "editing"
    CONFIRM_DISCARD = "confirm_discard"


VALID_TRANSITIONS = {
    Mode.READ_ONLY: [Mode.EDITING],
    Mode.EDITING: [Mode.READ_ONLY, Mode.CONFIRM_DISCARD],
    Mode.CONFIRM_DISCARD: [Mode.READ_ONLY, Mode.EDITING],
}


def can_transition(current: Mode, target: Mode) -> bool:
    return target in VALID_TRANSITIONS.get(current, [])


class ModeController:
    """Gates edits and asks for confirmation before dropping dirty rows.

    has_dirty:
        Returns whether the roster has unsaved changes.
    discard:
        Resets Working to Baseline for every record.
    on_exit_edit:
        Called whenever edit mode is left (the session cancels autosave here).
    """

    def __init__(
        self,
        has_dirty: Callable[[], bool],
        discard: Callable[[], None],
        *,
        on_exit_edit: Optional[Callable[[], None]] = None,
        event_bus: Optional[EventBus] = None,
        initial: Mode = Mode.READ_ONLY,
    ) -> None:
        self._has_dirty = has_dirty
        self._discard = discard
        self._on_exit_edit = on_exit_edit
        self._bus = event_bus
        self._mode = initial

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_editing(self) -> bool:
        return self._mode in (Mode.EDITING, Mode.CONFIRM_DISCARD)

    @property
    def edits_allowed(self) -> bool:
        return self._mode is Mode.EDITING

    @property
    def awaiting_confirmation(self) -> bool:
        return self._mode is Mode.CONFIRM_DISCARD

    def enter_edit(self) -> None:
        self._transition(Mode.EDITING)

    def request_exit(self) -> Mode:
        """Leave edit mode, or stop at CONFIRM_DISCARD when there is dirty data."""
        if self._mode is not Mode.EDITING:
            raise InvalidTransitionError(f"Cannot exit edit mode from {self._mode.value}")
        if self._has_dirty():
            self._transition(Mode.CONFIRM_DISCARD)
        else:
            self._leave_edit()
        return self._mode

    def confirm_discard(self) -> None:
        if self._mode is not Mode.CONFIRM_DISCARD:
            raise InvalidTransitionError(f"Nothing to confirm in {self._mode.value}")
        self._discard()
        self._leave_edit()

    def cancel_exit(self) -> None:
        if self._mode is not Mode.CONFIRM_DISCARD:
            raise InvalidTransitionError(f"Nothing to cancel in {self._mode.value}")
        self._transition(Mode.EDITING)

    def toggle(self) -> Mode:
        if self._mode is Mode.READ_ONLY:
            self.enter_edit()
        elif self._mode is Mode.EDITING:
            self.request_exit()
        # CONFIRM_DISCARD waits for an explicit answer.
        return self._mode

    def _leave_edit(self) -> None:
        self._transition(Mode.READ_ONLY)
        if self._on_exit_edit is not None:
            self._on_exit_edit()

    def _transition(self, target: Mode) -> None:
        if not can_transition(self._mode, target):
            raise InvalidTransitionError(f"Invalid transition {self._mode.value} -> {target.value}")
        previous, self._mode = self._mode, target
        log.debug("Mode %s -> %s", previous.value, target.value)
        if self._bus is not None:
            self._bus.emit(ModeChanged(mode=target, previous=previous))
