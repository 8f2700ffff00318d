# -*- coding: utf-8 -*-

import pytest

from app.events import EventBus, ModeChanged
from app.mode_controller import Mode, ModeController, can_transition
from services.errors import InvalidTransitionError


class _Roster:
    def __init__(self, dirty: bool = False):
        self.dirty = dirty
        self.discarded = 0
        self.exits = 0

    def controller(self, **kwargs) -> ModeController:
        return ModeController(lambda: self.dirty, self._discard, on_exit_edit=self._exit, **kwargs)

    def _discard(self):
        self.discarded += 1
        self.dirty = False

    def _exit(self):
        self.exits += 1


def test_starts_read_only_and_enters_edit():
    r = _Roster()
    mc = r.controller()
    assert mc.mode is Mode.READ_ONLY
    assert mc.edits_allowed is False
    mc.enter_edit()
    assert mc.mode is Mode.EDITING
    assert mc.edits_allowed is True


def test_clean_exit_goes_straight_to_read_only():
    r = _Roster()
    mc = r.controller()
    mc.enter_edit()
    assert mc.request_exit() is Mode.READ_ONLY
    assert r.exits == 1
    assert r.discarded == 0


def test_dirty_exit_waits_for_confirmation():
    r = _Roster(dirty=True)
    mc = r.controller()
    mc.enter_edit()
    assert mc.request_exit() is Mode.CONFIRM_DISCARD
    assert mc.is_editing is True
    assert mc.edits_allowed is False
    mc.confirm_discard()
    assert mc.mode is Mode.READ_ONLY
    assert r.discarded == 1


def test_cancel_exit_returns_to_editing_untouched():
    r = _Roster(dirty=True)
    mc = r.controller()
    mc.enter_edit()
    mc.request_exit()
    mc.cancel_exit()
    assert mc.mode is Mode.EDITING
    assert r.dirty is True
    assert r.discarded == 0
    assert r.exits == 0


def test_toggle_cycles_and_waits_in_confirmation():
    r = _Roster(dirty=True)
    mc = r.controller()
    assert mc.toggle() is Mode.EDITING
    assert mc.toggle() is Mode.CONFIRM_DISCARD
    assert mc.toggle() is Mode.CONFIRM_DISCARD


def test_invalid_transitions_raise():
    mc = _Roster().controller()
    with pytest.raises(InvalidTransitionError):
        mc.confirm_discard()
    with pytest.raises(InvalidTransitionError):
        mc.request_exit()
    assert can_transition(Mode.READ_ONLY, Mode.CONFIRM_DISCARD) is False


def test_mode_changes_are_published():
    bus = EventBus()
    seen = []
    bus.subscribe(ModeChanged, seen.append)
    mc = _Roster().controller(event_bus=bus)
    mc.enter_edit()
    assert seen == [ModeChanged(mode=Mode.EDITING, previous=Mode.READ_ONLY)]
