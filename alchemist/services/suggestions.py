"""Advisory suggestions derived from findings and from request patterns.

Nothing here changes the input data. Callers apply a suggestion themselves
and re-run the analysis afterwards.
"""

from __future__ import annotations

import json
import re
from collections import Counter, OrderedDict
from typing import Callable, Dict, List, Sequence

from alchemist.config import AnalysisConfig
from alchemist.domain.fields import loads_strict
from alchemist.domain.records import (
    CO_RUN,
    CONFLICTING_RULES,
    DUPLICATE_ID,
    INVALID_JSON,
    LOAD_LIMIT,
    MISSING_SKILL,
    OVERLOADED_WORKER,
    PHASE_SATURATION,
    UNKNOWN_REFERENCE,
    AnalysisSnapshot,
    Finding,
    Suggestion,
    Worker,
)

from .phases import phase_capacity
from .schema import duplicate_positions

QUALIFICATION_RANK = {"senior": 0, "mid": 1, "junior": 2}


def _unique_rename(base: str, taken: set) -> str:
    n = 2
    while f"{base}_{n}" in taken:
        n += 1
    new_id = f"{base}_{n}"
    taken.add(new_id)
    return new_id


def _suggest_duplicate_renames(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    renames = []
    for plural, id_field, ids in (
        ("Clients", "ClientID", [c.client_id for c in snapshot.clients]),
        ("Workers", "WorkerID", [w.worker_id for w in snapshot.workers]),
        ("Tasks", "TaskID", [t.task_id for t in snapshot.tasks]),
    ):
        taken = set(ids)
        for index, record_id in duplicate_positions(ids):
            renames.append(
                {
                    "entity": plural,
                    "field": id_field,
                    "row": index + 1,
                    "from": record_id,
                    "to": _unique_rename(record_id, taken),
                }
            )
    return Suggestion(
        kind=DUPLICATE_ID,
        message=f"Rename {len(renames)} duplicated identifier(s) with a numeric suffix",
        action="Rename Duplicates",
        data={"renames": renames},
    )


def repair_json(raw: str) -> str:
    """Propose a valid JSON blob for a malformed one."""
    text = raw.strip()
    candidates = [text, text.replace("'", '"')]
    if not text.startswith("{"):
        candidates.append("{" + text.replace("'", '"') + "}")
    if text.startswith("{") and not text.endswith("}"):
        candidates.append(text.replace("'", '"') + "}")
    for candidate in candidates:
        # quote bare keys: {a: 1} -> {"a": 1}
        for attempt in (candidate, re.sub(r'([{,]\s*)([A-Za-z_][\w-]*)\s*:', r'\1"\2":', candidate)):
            try:
                return json.dumps(loads_strict(attempt))
            except ValueError:
                continue
    return json.dumps({"note": text})


def _suggest_json_repairs(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    replacements = OrderedDict()
    for client in snapshot.clients:
        if client.attributes.present and not client.attributes.ok:
            replacements[client.client_id] = repair_json(client.attributes_json)
    return Suggestion(
        kind=INVALID_JSON,
        message=f"Replace {len(replacements)} malformed AttributesJSON value(s)",
        action="Fix JSON",
        data={"field": "AttributesJSON", "replacements": dict(replacements)},
    )


def _suggest_phase_redistribution(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    loads = phase_capacity(snapshot)
    saturated = sorted({int(f.subject) for f in findings if f.subject and f.subject.isdigit()})
    spare = sorted(
        (load for phase, load in loads.items() if phase not in saturated and load.headroom > 0),
        key=lambda load: (-load.headroom, load.phase),
    )
    return Suggestion(
        kind=PHASE_SATURATION,
        message=(
            f"Move demand out of phase(s) {', '.join(map(str, saturated))}"
            + (f" into phase(s) {', '.join(str(load.phase) for load in spare)}" if spare else "")
        ),
        action="Redistribute Load",
        data={
            "saturated": {
                str(phase): {
                    "demand": loads[phase].required_duration,
                    "supply": loads[phase].supplied_slots,
                }
                for phase in saturated
                if phase in loads
            },
            "redistributeTo": [load.phase for load in spare],
            "headroom": {str(load.phase): load.headroom for load in spare},
        },
    )


def _rank_worker(worker: Worker):
    level = QUALIFICATION_RANK.get(worker.qualification_level.strip().lower(), len(QUALIFICATION_RANK))
    return (level, len(worker.skill_set), worker.worker_id)


def _co_required_skills(snapshot: AnalysisSnapshot, skill: str) -> frozenset:
    """Other skills required by the tasks that need ``skill``."""
    needed = set()
    for task in snapshot.tasks:
        if skill in task.skill_set:
            needed |= task.skill_set
    needed.discard(skill)
    return frozenset(needed)


def _best_trainee(snapshot: AnalysisSnapshot, skill: str):
    """
    Pick the worker to train in ``skill``.

    Workers already holding most of the skills its tasks need alongside it
    come first; ties go to the more senior, then less specialized worker.
    """
    co_required = _co_required_skills(snapshot, skill)
    candidates = [w for w in snapshot.workers if w.worker_id]
    if not candidates:
        return None
    best = min(candidates, key=lambda w: (-len(co_required & w.skill_set), _rank_worker(w)))
    return best.worker_id


def _suggest_skill_training(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    skills = [f.subject for f in findings if f.subject]
    assign = {skill: _best_trainee(snapshot, skill) for skill in skills}
    return Suggestion(
        kind=MISSING_SKILL,
        message=f"Add {len(skills)} uncovered skill(s) to a worker or hire for them: {', '.join(skills)}",
        action="Assign Skills",
        data={"skills": skills, "assignTo": assign},
    )


def _suggest_reference_cleanup(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    known = snapshot.task_ids
    cleaned = OrderedDict()
    for client in snapshot.clients:
        if any(task_id not in known for task_id in client.requested_tasks):
            kept = [task_id for task_id in client.requested_tasks if task_id in known]
            cleaned[client.client_id] = ",".join(kept)
    unknown = sorted({f.subject for f in findings if f.subject})
    return Suggestion(
        kind=UNKNOWN_REFERENCE,
        message=f"Remove {len(unknown)} unknown task reference(s): {', '.join(unknown)}",
        action="Remove References",
        data={"field": "RequestedTaskIDs", "unknown": unknown, "replacements": dict(cleaned)},
    )


def _suggest_rule_review(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    rule_ids: List[str] = []
    for f in findings:
        for rule_id in (f.subject or "").split(","):
            if rule_id and rule_id not in rule_ids:
                rule_ids.append(rule_id)
    return Suggestion(
        kind=CONFLICTING_RULES,
        message=f"Review or deactivate {len(rule_ids)} conflicting rule(s): {', '.join(rule_ids)}",
        action="Review Rules",
        data={"rules": rule_ids},
    )


def _suggest_load_caps(findings, snapshot: AnalysisSnapshot) -> Suggestion:
    flagged = {f.subject for f in findings}
    proposed = OrderedDict()
    for worker in snapshot.workers:
        if worker.worker_id in flagged and worker.phases.ok and worker.phases.value:
            proposed[worker.worker_id] = len(worker.phases.value)
    return Suggestion(
        kind=OVERLOADED_WORKER,
        message=f"Lower MaxLoadPerPhase for {len(proposed)} worker(s) to their available phase count",
        action="Adjust Load",
        data={"field": "MaxLoadPerPhase", "replacements": dict(proposed)},
    )


SUGGESTERS: Dict[str, Callable[[List[Finding], AnalysisSnapshot], Suggestion]] = {
    MISSING_SKILL: _suggest_skill_training,
    INVALID_JSON: _suggest_json_repairs,
    DUPLICATE_ID: _suggest_duplicate_renames,
    PHASE_SATURATION: _suggest_phase_redistribution,
    CONFLICTING_RULES: _suggest_rule_review,
    OVERLOADED_WORKER: _suggest_load_caps,
    UNKNOWN_REFERENCE: _suggest_reference_cleanup,
}


def suggest_from_findings(findings: Sequence[Finding], snapshot: AnalysisSnapshot) -> List[Suggestion]:
    """One suggestion per actionable finding kind, in order of first appearance."""
    groups: "OrderedDict[str, List[Finding]]" = OrderedDict()
    for f in findings:
        groups.setdefault(f.kind, []).append(f)
    suggestions = []
    for kind, group in groups.items():
        suggester = SUGGESTERS.get(kind)
        if suggester is None:
            continue
        suggestion = suggester(group, snapshot)
        suggestion.finding_count = len(group)
        suggestions.append(suggestion)
    return suggestions


def recommend_rules(snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Suggestion]:
    """
    Rule recommendations from request patterns.

    - Task pairs requested together by at least ``co_run_pair_min_count``
      clients get a coRun proposal (skipped when an active coRun already
      covers the pair).
    - Workers with MaxLoadPerPhase above ``high_load_threshold`` get a
      loadLimit proposal.
    """
    pairs: Counter = Counter()
    for client in snapshot.clients:
        tasks = list(OrderedDict.fromkeys(client.requested_tasks))
        for i, first in enumerate(tasks):
            for second in tasks[i + 1:]:
                pairs[tuple(sorted((first, second)))] += 1

    covered = set()
    for rule in snapshot.rules_of_type(CO_RUN):
        members = rule.corun_tasks
        for i, first in enumerate(members):
            for second in members[i + 1:]:
                covered.add(tuple(sorted((first, second))))

    suggestions: List[Suggestion] = []
    for pair, count in sorted(pairs.items(), key=lambda item: (-item[1], item[0])):
        if count < cfg.co_run_pair_min_count or pair in covered:
            continue
        suggestions.append(
            Suggestion(
                kind="co_run_suggestion",
                message=(
                    f"Tasks {pair[0]} and {pair[1]} are requested together {count} times. "
                    "Consider adding a Co-run rule."
                ),
                action="Add Co-run Rule",
                data={"rule": {"type": CO_RUN, "config": {"tasks": list(pair)}}, "count": count},
            )
        )

    for worker in snapshot.workers:
        if worker.max_load_per_phase > cfg.high_load_threshold:
            group = worker.worker_group or worker.worker_id
            suggestions.append(
                Suggestion(
                    kind="load_limit_suggestion",
                    message=(
                        f"Worker {worker.worker_id} has high MaxLoadPerPhase "
                        f"({worker.max_load_per_phase}). Consider setting load limits."
                    ),
                    action="Set Load Limit",
                    data={
                        "worker": worker.worker_id,
                        "currentLoad": worker.max_load_per_phase,
                        "rule": {
                            "type": LOAD_LIMIT,
                            "config": {"workerGroup": group, "maxSlots": cfg.high_load_threshold},
                        },
                    },
                )
            )
    return suggestions


def derive_suggestions_for(
    findings: Sequence[Finding], snapshot: AnalysisSnapshot, cfg: AnalysisConfig
) -> List[Suggestion]:
    return suggest_from_findings(findings, snapshot) + recommend_rules(snapshot, cfg)
