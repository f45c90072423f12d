"""Tests for rule conflict detection."""

from alchemist import analyze
from alchemist.domain.records import CONFLICTING_RULES, ERROR, WARNING, AnalysisSnapshot
from alchemist.services.conflicts import check_load_limits, group_capacity, phase_windows

TASKS = [
    {"TaskID": "T1", "Duration": 1, "MaxConcurrent": 1},
    {"TaskID": "T2", "Duration": 1, "MaxConcurrent": 1},
]


def _rules(t2_phases):
    return [
        {"id": "co", "type": "coRun", "config": {"tasks": ["T1", "T2"]}},
        {"id": "w1", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": [1]}},
        {"id": "w2", "type": "phaseWindow", "config": {"taskId": "T2", "allowedPhases": t2_phases}},
    ]


def _conflicts(findings):
    return [f for f in findings if f.kind == CONFLICTING_RULES]


def test_disjoint_phase_windows_conflict_with_corun():
    conflicts = _conflicts(analyze(tasks=TASKS, rules=_rules([2])))
    assert len(conflicts) == 1
    assert conflicts[0].severity == ERROR
    assert conflicts[0].subject == "co,w1,w2"


def test_overlapping_phase_windows_do_not_conflict():
    assert not _conflicts(analyze(tasks=TASKS, rules=_rules([1, 2])))


def test_single_constrained_task_does_not_conflict():
    rules = _rules([2])[:2]
    assert not _conflicts(analyze(tasks=TASKS, rules=rules))


def test_multiple_windows_on_one_task_intersect():
    rules = _rules([1, 2]) + [{"id": "w3", "type": "phaseWindow", "config": {"taskId": "T2", "allowedPhases": [2]}}]
    assert len(_conflicts(analyze(tasks=TASKS, rules=rules))) == 1


def test_inactive_window_ignored():
    rules = _rules([2])
    rules[2]["active"] = False
    assert not _conflicts(analyze(tasks=TASKS, rules=rules))


def test_phase_windows_accept_ranges():
    snapshot = AnalysisSnapshot.build(
        rules=[{"id": "w", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": "2-3"}}]
    )
    assert phase_windows(snapshot) == {"T1": [("w", (2, 3))]}


def test_load_limit_above_group_capacity():
    snapshot = AnalysisSnapshot.build(
        workers=[
            {"WorkerID": "W1", "WorkerGroup": "core", "MaxLoadPerPhase": 2},
            {"WorkerID": "W2", "WorkerGroup": "core", "MaxLoadPerPhase": 1},
        ],
        rules=[
            {"id": "l1", "type": "loadLimit", "config": {"workerGroup": "core", "maxSlots": 5}},
            {"id": "l2", "type": "loadLimit", "config": {"workerGroup": "core", "maxSlots": 3}},
            {"id": "l3", "type": "loadLimit", "config": {"workerGroup": "ghost", "maxSlots": 9}},
        ],
    )
    assert group_capacity(snapshot) == {"core": 3}
    findings = check_load_limits(snapshot)
    assert [f.subject for f in findings] == ["l1"]
    assert findings[0].severity == WARNING
