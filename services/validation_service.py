# -*- coding: utf-8 -*-
"""ValidationService

Runs the schema's pure validators on a record snapshot before it is
dispatched.

- No PyQt dependency.
- Validators return core.types.Issue dataclass instances.
- ERROR issues block the commit of that record (ValidationError); warnings
  are logged and the record is still sent.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping

from core.records import RecordSchema
from core.types import Issue, RecordId, Scalar, Severity
from services.errors import ValidationError

log = logging.getLogger(__name__)


def _issue_to_dict(it: Issue) -> dict:
    sev = str(it.severity.value if hasattr(it.severity, "value") else it.severity)
    level = {
        "info": "info",
        "warning": "warn",
        "error": "error",
    }.get(sev, "warn")
    return {
        "code": it.code,
        "msg": it.message,
        "level": level,
        "context": it.context,
    }


class ValidationService:
    def __init__(self, schema: RecordSchema) -> None:
        self.schema = schema
        self.last_issues: Dict[RecordId, List[dict]] = {}

    def validate(self, record_id: RecordId, value: Mapping[str, Scalar]) -> List[Issue]:
        issues: List[Issue] = []
        for fn in self.schema.validators:
            try:
                issues.extend(fn(record_id, value) or [])
            except Exception:
                log.debug("validator %r failed for %r", fn, record_id, exc_info=True)
                issues.append(
                    Issue(
                        code="VALIDATOR_CRASH",
                        message=f"{record_id}: a validator failed (see logs).",
                        severity=Severity.WARNING,
                        context=str(record_id),
                    )
                )

        # Deduplicate by (code,msg,context)
        seen = set()
        uniq: List[Issue] = []
        for it in issues:
            key = (it.code, it.message, it.context)
            if key in seen:
                continue
            seen.add(key)
            uniq.append(it)

        if uniq:
            self.last_issues[record_id] = [_issue_to_dict(it) for it in uniq]
        else:
            self.last_issues.pop(record_id, None)
        return uniq

    def check(self, record_id: RecordId, value: Mapping[str, Scalar]) -> List[Issue]:
        """Return non-blocking issues; raise ValidationError on blocking ones."""
        issues = self.validate(record_id, value)
        blocking = [it for it in issues if it.blocking]
        if blocking:
            raise ValidationError(record_id, blocking)
        for it in issues:
            log.warning("Validation %s: %s", it.code, it.message)
        return issues
