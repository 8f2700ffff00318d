# -*- coding: utf-8 -*-
"""Decides whether leaving the current view must be intercepted."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from app import config

log = logging.getLogger(__name__)


class NavigationGuard:
    """Intercepts navigation while there are unsaved, not-in-flight edits.

    With ``block_while_saving`` off (the reference behaviour), a running save
    lets navigation through: the commit lands or fails on its own.
    """

    def __init__(
        self,
        dirty_count: Callable[[], int],
        persisting: Callable[[], bool],
        *,
        block_while_saving: bool = config.BLOCK_NAVIGATION_WHILE_SAVING,
    ) -> None:
        self._dirty_count = dirty_count
        self._persisting = persisting
        self.block_while_saving = bool(block_while_saving)

    def should_block(self) -> bool:
        if self._persisting():
            return self.block_while_saving
        return self._dirty_count() > 0

    def check(self) -> Optional[str]:
        """Human-readable warning when navigation should be intercepted."""
        if not self.should_block():
            return None
        if self._persisting():
            return "Changes are still being saved. Leave this page anyway?"
        count = self._dirty_count()
        noun = "change" if count == 1 else "changes"
        return config.NAVIGATION_WARNING.format(count=count, noun=noun)

    def confirm_leave(self, prompt: Callable[[str], bool]) -> bool:
        """Return True if navigation may proceed.

        ``prompt`` receives the warning and returns the user's answer
        (True = leave anyway). It is only called when a warning applies.
        """
        message = self.check()
        if message is None:
            return True
        allowed = bool(prompt(message))
        log.info("Navigation guard: user %s leaving", "confirmed" if allowed else "cancelled")
        return allowed
