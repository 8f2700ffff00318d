# -*- coding: utf-8 -*-

import pytest

from core.attendance import AttendanceStatus, attendance_schema, tally
from core.records import RecordSchema
from core.types import Severity
from core.validators.records import max_length, one_of, required
from services.errors import ValidationError
from services.validation_service import ValidationService


def test_required_and_choice_validators_block():
    svc = ValidationService(RecordSchema(validators=(required("first_name"), one_of("grade", ["1", "2"]))))
    with pytest.raises(ValidationError) as info:
        svc.check("s1", {"first_name": "  ", "grade": "9"})
    codes = sorted(i.code for i in info.value.issues)
    assert codes == ["FIELD_CHOICE", "FIELD_REQUIRED"]
    assert info.value.record_id == "s1"
    assert svc.last_issues["s1"][0]["level"] == "error"


def test_warnings_do_not_block():
    svc = ValidationService(RecordSchema(validators=(max_length("note", 5),)))
    issues = svc.check("s1", {"note": "far too long"})
    assert [i.severity for i in issues] == [Severity.WARNING]


def test_crashing_validator_is_reported_not_raised():
    def boom(record_id, value):
        raise RuntimeError("bug")

    svc = ValidationService(RecordSchema(validators=(boom,)))
    issues = svc.check("s1", {})
    assert issues[0].code == "VALIDATOR_CRASH"
    assert issues[0].blocking is False


def test_clean_record_clears_previous_issues():
    svc = ValidationService(RecordSchema(validators=(required("name"),)))
    with pytest.raises(ValidationError):
        svc.check("s1", {})
    assert svc.check("s1", {"name": "Ana"}) == []
    assert "s1" not in svc.last_issues


def test_attendance_schema_accepts_known_marks_and_blank():
    svc = ValidationService(attendance_schema())
    assert svc.check("s1", {"status": AttendanceStatus.LATE.value}) == []
    assert svc.check("s2", {"status": None}) == []
    with pytest.raises(ValidationError):
        svc.check("s3", {"status": "Sick"})


def test_tally_counts_unmarked():
    counts = tally([{"status": "Present"}, {"status": "Present"}, {"status": "Late"}, {}, None])
    assert counts == {"Present": 2, "Absent": 0, "Excused": 0, "Late": 1, "Unmarked": 2}
