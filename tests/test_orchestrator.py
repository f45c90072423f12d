"""Tests for Orchestrator - stage order, determinism and parallel runs."""

import copy

import pytest

from alchemist import analyze, derive_suggestions
from alchemist.config import AnalysisConfig
from alchemist.domain.records import (
    CIRCULAR_CORUN,
    DUPLICATE_ID,
    INVALID_JSON,
    MISSING_SKILL,
    PHASE_SATURATION,
    UNKNOWN_REFERENCE,
    AnalysisSnapshot,
)
from alchemist.engine import BaseAnalyzer, Orchestrator


@pytest.fixture
def messy_rows():
    """Rows that trigger one finding from most stages."""
    clients = [
        {"ClientID": "C1", "PriorityLevel": 3, "RequestedTaskIDs": "T1,T9", "AttributesJSON": "{bad"},
        {"ClientID": "C1", "PriorityLevel": 2, "RequestedTaskIDs": "T1,T2"},
    ]
    workers = [{"WorkerID": "W1", "Skills": "python", "AvailableSlots": "[1]", "MaxLoadPerPhase": 1}]
    tasks = [
        {"TaskID": "T1", "Duration": 4, "RequiredSkills": "python", "PreferredPhases": "[1]", "MaxConcurrent": 1},
        {"TaskID": "T2", "Duration": 1, "RequiredSkills": "rust", "PreferredPhases": "[2]", "MaxConcurrent": 1},
        {"TaskID": "T3", "Duration": 1, "MaxConcurrent": 1},
    ]
    rules = [
        {"id": "r1", "type": "coRun", "config": {"tasks": ["T1", "T2"]}},
        {"id": "r2", "type": "coRun", "config": {"tasks": ["T2", "T3"]}},
        {"id": "r3", "type": "coRun", "config": {"tasks": ["T3", "T1"]}},
    ]
    return clients, workers, tasks, rules


def test_clean_data_has_no_findings(clean_rows):
    clients, workers, tasks = clean_rows
    assert analyze(clients, workers, tasks, []) == []


def test_analyze_is_deterministic(messy_rows):
    first = analyze(*messy_rows)
    second = analyze(*messy_rows)
    assert first == second
    assert len(first) > 0


def test_findings_follow_stage_order(messy_rows):
    kinds = [f.kind for f in analyze(*messy_rows)]
    expected = [DUPLICATE_ID, UNKNOWN_REFERENCE, MISSING_SKILL, INVALID_JSON, CIRCULAR_CORUN, PHASE_SATURATION]
    positions = [kinds.index(kind) for kind in expected]
    assert positions == sorted(positions)


def test_inputs_are_not_mutated(messy_rows):
    before = copy.deepcopy(messy_rows)
    analyze(*messy_rows)
    derive_suggestions(analyze(*messy_rows), *messy_rows)
    assert messy_rows == before


def test_parallel_matches_sequential(messy_rows):
    sequential = analyze(*messy_rows)
    parallel = analyze(*messy_rows, cfg=AnalysisConfig(parallel=True, max_workers=4))
    assert parallel == sequential


def test_custom_stage_list():
    class Nothing(BaseAnalyzer):
        name = "nothing"

        def analyze(self, snapshot, cfg):
            return []

    orchestrator = Orchestrator([Nothing()])
    assert orchestrator.run(AnalysisSnapshot.build(clients=[{"ClientID": ""}])) == []


def test_failing_stage_is_raised():
    class Broken(BaseAnalyzer):
        name = "broken"

        def analyze(self, snapshot, cfg):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        Orchestrator([Broken()]).run(AnalysisSnapshot())


def test_empty_input():
    assert analyze() == []
    assert analyze([], [], [], []) == []


@pytest.mark.parametrize(
    "inputs",
    [
        {"rules": [{"id": "r", "type": "coRun", "config": "x"}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": [1, 2]}]},
        {"rules": [{"id": "r", "type": "coRun", "config": {"tasks": 5}}]},
        {"rules": [{"id": "r", "type": "coRun", "config": {"tasks": True}}]},
        {"rules": [{"id": "r", "type": "coRun", "config": {"tasks": [None, 3, ["T1"]]}}]},
        {"rules": [{"id": "r", "type": "loadLimit", "config": {"workerGroup": "g", "maxSlots": "lots"}}]},
        {"rules": [{"id": "r", "type": "loadLimit", "config": {"workerGroup": ["g"], "maxSlots": [1]}}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": 5}}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": {"taskId": 7, "allowedPhases": "abc"}}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": {"a": 1}}}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": [True]}}]},
        {"rules": [{"id": "r", "type": "phaseWindow", "config": {"taskId": "T1", "allowedPhases": "1-999999999999"}}]},
        {"rules": [{"id": None, "type": None, "config": None, "active": "maybe"}, "coRun", 42]},
        {"clients": [{"ClientID": "C1", 1: "x", "extra": "y"}]},
        {"clients": [{"ClientID": 5, "PriorityLevel": "high", "RequestedTaskIDs": ["T1"], "AttributesJSON": {"a": 1}}]},
        {"workers": [{"WorkerID": "W1", "AvailableSlots": "1-3000000", "MaxLoadPerPhase": "9" * 5000}]},
        {"tasks": [{"TaskID": "T1", "Duration": 1, "MaxConcurrent": 1, "PreferredPhases": "1-3000000"}]},
        {"tasks": [{"TaskID": "T1", "Duration": None, "MaxConcurrent": float("inf"), "PreferredPhases": [1, 2]}]},
    ],
)
def test_analyze_never_raises_on_malformed_input(inputs):
    tasks = inputs.get("tasks", [{"TaskID": "T1", "Duration": 1, "MaxConcurrent": 1}])
    findings = analyze(inputs.get("clients"), inputs.get("workers"), tasks, inputs.get("rules"))
    assert isinstance(findings, list)
    suggestions = derive_suggestions(findings, inputs.get("clients"), inputs.get("workers"), tasks, inputs.get("rules"))
    assert isinstance(suggestions, list)
    assert len(findings) < 100
