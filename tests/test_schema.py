"""Tests for schema integrity and field-format checks."""

from alchemist import analyze
from alchemist.config import AnalysisConfig
from alchemist.domain.records import (
    DUPLICATE_ID,
    ERROR,
    INVALID_DURATION,
    INVALID_JSON,
    INVALID_PHASES,
    INVALID_RANGE,
    INVALID_SLOTS,
    MISSING_ID,
    AnalysisSnapshot,
    Client,
    Task,
)
from alchemist.services.schema import (
    check_duplicate_ids,
    check_field_formats,
    check_missing_ids,
    duplicate_positions,
)


def _of_kind(findings, kind):
    return [f for f in findings if f.kind == kind]


def test_duplicate_client_ids():
    findings = analyze(clients=[{"ClientID": "C1"}, {"ClientID": "C1"}, {"ClientID": "C2"}])
    duplicates = _of_kind(findings, DUPLICATE_ID)
    assert len(duplicates) == 1
    assert "C1" in duplicates[0].message
    assert duplicates[0].subject == "C1"
    assert duplicates[0].entity == "Clients"
    assert not any("C2" in f.message for f in duplicates)


def test_duplicates_reported_for_every_later_occurrence():
    assert duplicate_positions(["A", "B", "A", "A", "", ""]) == [(2, "A"), (3, "A")]


def test_duplicates_across_entities():
    snapshot = AnalysisSnapshot.build(
        workers=[{"WorkerID": "W1"}, {"WorkerID": "W1"}],
        tasks=[{"TaskID": "T1"}, {"TaskID": "T1"}],
    )
    findings = check_duplicate_ids(snapshot)
    assert [f.entity for f in findings] == ["Workers", "Tasks"]
    assert findings[0].message == "Duplicate WorkerID: W1 (row 2)"


def test_missing_ids():
    findings = analyze(clients=[{"ClientID": ""}], tasks=[{"TaskID": "  ", "Duration": 1, "MaxConcurrent": 1}])
    missing = _of_kind(findings, MISSING_ID)
    assert [f.entity for f in missing] == ["Client row 1", "Task row 1"]
    assert all(f.severity == ERROR for f in missing)
    # empty ids are not duplicates of each other
    assert not _of_kind(findings, DUPLICATE_ID)


def test_priority_out_of_range():
    findings = analyze(clients=[{"ClientID": "C1", "PriorityLevel": 6}])
    invalid = _of_kind(findings, INVALID_RANGE)
    assert len(invalid) == 1
    assert "6" in invalid[0].message
    assert invalid[0].severity == ERROR


def test_priority_in_range():
    findings = analyze(clients=[{"ClientID": "C1", "PriorityLevel": 3}])
    assert not _of_kind(findings, INVALID_RANGE)


def test_priority_range_is_configurable():
    cfg = AnalysisConfig(priority_range=(1, 10))
    assert not _of_kind(analyze(clients=[{"ClientID": "C1", "PriorityLevel": 6}], cfg=cfg), INVALID_RANGE)


def test_invalid_duration():
    findings = analyze(tasks=[{"TaskID": "T1", "Duration": 0, "MaxConcurrent": 1}])
    invalid = _of_kind(findings, INVALID_DURATION)
    assert len(invalid) == 1
    assert invalid[0].message == "Duration must be >= 1, got 0"


def test_valid_json_attributes():
    findings = analyze(clients=[{"ClientID": "C1", "PriorityLevel": 3, "AttributesJSON": '{"a":1}'}])
    assert not _of_kind(findings, INVALID_JSON)


def test_invalid_json_attributes():
    findings = analyze(clients=[{"ClientID": "C1", "PriorityLevel": 3, "AttributesJSON": "{bad"}])
    invalid = _of_kind(findings, INVALID_JSON)
    assert len(invalid) == 1
    assert invalid[0].message == "Invalid JSON in AttributesJSON"


def test_blank_ids_on_typed_records_are_missing():
    snapshot = AnalysisSnapshot(clients=(Client(client_id="  "),), tasks=(Task(task_id="\t"),))
    findings = check_missing_ids(snapshot)
    assert [(f.kind, f.entity) for f in findings] == [(MISSING_ID, "Client row 1"), (MISSING_ID, "Task row 1")]


def test_duplicates_ignore_surrounding_whitespace():
    assert duplicate_positions(["A", " A ", "  ", " "]) == [(1, "A")]


def test_malformed_slots_and_phases():
    snapshot = AnalysisSnapshot.build(
        workers=[{"WorkerID": "W1", "AvailableSlots": "1,2"}, {"WorkerID": "W2", "AvailableSlots": "[1,2]"}],
        tasks=[{"TaskID": "T1", "PreferredPhases": "[0]"}, {"TaskID": "T2", "PreferredPhases": "1-3"}],
    )
    findings = check_field_formats(snapshot)
    assert [(f.kind, f.subject) for f in findings] == [(INVALID_SLOTS, "W1"), (INVALID_PHASES, "T1")]


def test_huge_phase_range_is_one_format_error():
    findings = analyze(tasks=[{"TaskID": "T1", "Duration": 1, "MaxConcurrent": 1, "PreferredPhases": "1-3000000"}])
    assert [f.kind for f in findings] == [INVALID_PHASES]
    assert "exceeds" in findings[0].message
