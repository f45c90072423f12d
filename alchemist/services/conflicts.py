"""Conflicts between business rules, and between rules and worker capacity."""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List, Tuple

from alchemist.domain.records import (
    CO_RUN,
    CONFLICTING_RULES,
    LOAD_LIMIT,
    PHASE_WINDOW,
    WARNING,
    AnalysisSnapshot,
    Finding,
    finding,
)


def phase_windows(snapshot: AnalysisSnapshot) -> "OrderedDict[str, List[Tuple[str, Tuple[int, ...]]]]":
    """Map task id -> [(rule id, allowed phases)] for every active phaseWindow rule."""
    windows: "OrderedDict[str, List[Tuple[str, Tuple[int, ...]]]]" = OrderedDict()
    for rule in snapshot.rules_of_type(PHASE_WINDOW):
        task_id = rule.window_task
        allowed = rule.allowed_phases
        if not task_id or allowed is None:
            continue
        windows.setdefault(task_id, []).append((rule.id, allowed))
    return windows


def check_corun_windows(snapshot: AnalysisSnapshot) -> List[Finding]:
    """A co-run group whose members' phase windows share no phase can never run."""
    windows = phase_windows(snapshot)
    findings: List[Finding] = []
    for rule in snapshot.rules_of_type(CO_RUN):
        tasks = rule.corun_tasks
        if len(tasks) < 2:
            continue
        constrained = [task for task in tasks if task in windows]
        if len(constrained) < 2:
            continue
        common = None
        window_rules: List[str] = []
        for task in constrained:
            for window_rule, allowed in windows[task]:
                window_rules.append(window_rule)
                common = set(allowed) if common is None else common & set(allowed)
        if common:
            continue
        findings.append(
            finding(
                CONFLICTING_RULES,
                f"Co-run rule {rule.id} conflicts with phase windows: "
                f"tasks {', '.join(constrained)} share no allowed phase",
                f"Rule {rule.id}",
                field="phaseWindow",
                subject=",".join([rule.id] + window_rules),
            )
        )
    return findings


def group_capacity(snapshot: AnalysisSnapshot) -> Dict[str, int]:
    """Sum of MaxLoadPerPhase per worker group."""
    capacity: Dict[str, int] = {}
    for worker in snapshot.workers:
        group = worker.worker_group.strip()
        capacity[group] = capacity.get(group, 0) + max(worker.max_load_per_phase, 0)
    return capacity


def check_load_limits(snapshot: AnalysisSnapshot) -> List[Finding]:
    """A load limit above the group's real capacity can never be reached."""
    capacity = group_capacity(snapshot)
    findings: List[Finding] = []
    for rule in snapshot.rules_of_type(LOAD_LIMIT):
        group = rule.worker_group
        if not group or group not in capacity:
            continue
        if rule.max_slots > capacity[group]:
            findings.append(
                finding(
                    CONFLICTING_RULES,
                    f"Load limit {rule.id} allows {rule.max_slots} slots but group "
                    f"'{group}' only has capacity {capacity[group]}",
                    f"Rule {rule.id}",
                    field="loadLimit",
                    subject=rule.id,
                    severity=WARNING,
                )
            )
    return findings


def check_rule_conflicts(snapshot: AnalysisSnapshot) -> List[Finding]:
    return check_corun_windows(snapshot) + check_load_limits(snapshot)
