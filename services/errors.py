# -*- coding: utf-8 -*-
"""services/errors.py

Error taxonomy for the edit/save engine (no PyQt dependency).

- ValidationError: local, raised before dispatch; the record stays dirty.
- CommitError: the remote call failed or answered "error" for one record.
- PartialBatchFailure: aggregate of a batch with at least one failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from core.types import Issue, RecordId

if TYPE_CHECKING:
    from services.outcomes import BatchResult


class EngineError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(EngineError):
    def __init__(self, record_id: RecordId, issues: Sequence[Issue]) -> None:
        self.record_id = record_id
        self.issues = tuple(issues)
        detail = "; ".join(i.message for i in self.issues) or "invalid record"
        super().__init__(detail)


class CommitError(EngineError):
    def __init__(self, record_id: RecordId, reason: str, *, cause: Any = None) -> None:
        self.record_id = record_id
        self.reason = str(reason)
        self.cause = cause
        super().__init__(f"{record_id}: {self.reason}")


class PartialBatchFailure(EngineError):
    def __init__(self, result: "BatchResult") -> None:
        self.result = result
        super().__init__(result.summary())


class SaveInProgressError(EngineError):
    """A commit cycle is already running; only one may be in flight."""


class EditNotAllowedError(EngineError):
    """Edits are only accepted while the roster is in edit mode."""


class UnknownRecordError(EngineError, KeyError):
    def __init__(self, record_id: RecordId) -> None:
        self.record_id = record_id
        super().__init__(record_id)

    def __str__(self) -> str:
        return f"Record {self.record_id!r} is not in the current roster"


class InvalidTransitionError(EngineError, ValueError):
    pass
