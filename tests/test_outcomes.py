# -*- coding: utf-8 -*-

import pytest

from services.errors import PartialBatchFailure
from services.outcomes import BatchResult, Committed, Failed


def test_summary_texts():
    assert BatchResult().summary() == "Nothing to save"
    assert BatchResult(succeeded=frozenset({"a"})).summary() == "Saved all 1 change"
    mixed = BatchResult.from_outcomes([Committed("a", {}), Committed("b", {}), Failed("c", "boom")])
    assert mixed.summary() == "Saved 2, failed 1"
    assert mixed.total == 3


def test_raise_for_failures():
    BatchResult(succeeded=frozenset({"a"})).raise_for_failures()
    bad = BatchResult(failed={"x": "timeout"})
    with pytest.raises(PartialBatchFailure) as info:
        bad.raise_for_failures()
    assert info.value.result is bad
