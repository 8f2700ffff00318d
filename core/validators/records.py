# -*- coding: utf-8 -*-
"""Reusable record validators (return Issue lists, never raise)."""

from __future__ import annotations

from typing import Iterable, List, Mapping

from core.records import FieldValidator
from core.types import Issue, RecordId, Scalar, Severity


def required(*names: str) -> FieldValidator:
    def _check(record_id: RecordId, value: Mapping[str, Scalar]) -> List[Issue]:
        issues: List[Issue] = []
        for name in names:
            if not str(value.get(name) or "").strip():
                issues.append(
                    Issue(
                        code="FIELD_REQUIRED",
                        message=f"{record_id}: '{name}' is required.",
                        severity=Severity.ERROR,
                        context=name,
                    )
                )
        return issues

    return _check


def one_of(name: str, allowed: Iterable[str], *, allow_empty: bool = True) -> FieldValidator:
    choices = frozenset(allowed)

    def _check(record_id: RecordId, value: Mapping[str, Scalar]) -> List[Issue]:
        v = value.get(name)
        if v in (None, "") and allow_empty:
            return []
        if v not in choices:
            return [
                Issue(
                    code="FIELD_CHOICE",
                    message=f"{record_id}: '{name}' must be one of {', '.join(sorted(choices))} (got {v!r}).",
                    severity=Severity.ERROR,
                    context=name,
                )
            ]
        return []

    return _check


def max_length(name: str, limit: int) -> FieldValidator:
    def _check(record_id: RecordId, value: Mapping[str, Scalar]) -> List[Issue]:
        v = value.get(name) or ""
        if len(v) > int(limit):
            return [
                Issue(
                    code="FIELD_TOO_LONG",
                    message=f"{record_id}: '{name}' exceeds {limit} characters.",
                    severity=Severity.WARNING,
                    context=name,
                )
            ]
        return []

    return _check
