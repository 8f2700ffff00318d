# -*- coding: utf-8 -*-

from app.navigation_guard import NavigationGuard


def test_clean_roster_does_not_block():
    g = NavigationGuard(lambda: 0, lambda: False)
    assert g.should_block() is False
    assert g.check() is None
    assert g.confirm_leave(lambda msg: False) is True


def test_dirty_roster_blocks_with_warning():
    g = NavigationGuard(lambda: 2, lambda: False)
    assert g.should_block() is True
    assert "2 unsaved changes" in g.check()


def test_user_can_cancel_or_confirm_leaving():
    g = NavigationGuard(lambda: 1, lambda: False)
    prompts = []
    assert g.confirm_leave(lambda msg: prompts.append(msg) or False) is False
    assert g.confirm_leave(lambda msg: True) is True
    assert "1 unsaved change." in prompts[0]


def test_save_in_flight_does_not_block_by_default():
    g = NavigationGuard(lambda: 3, lambda: True)
    assert g.should_block() is False
    assert g.check() is None


def test_strict_mode_blocks_while_saving():
    g = NavigationGuard(lambda: 0, lambda: True, block_while_saving=True)
    assert g.should_block() is True
    assert "still being saved" in g.check()
