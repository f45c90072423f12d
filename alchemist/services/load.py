"""Concurrency and worker-load checks."""

from __future__ import annotations

from typing import List

from alchemist.domain.records import (
    INVALID_CONCURRENT,
    INVALID_LOAD,
    OVERLOADED_WORKER,
    WARNING,
    AnalysisSnapshot,
    Finding,
    finding,
)

from .coverage import qualified_workers


def check_load(snapshot: AnalysisSnapshot) -> List[Finding]:
    """
    Validate MaxConcurrent and MaxLoadPerPhase.

    Besides the >= 1 range checks this flags:
    - workers available in fewer phases than their per-phase load, and
    - tasks allowing more parallel runs than there are qualified workers
      (only when at least one worker qualifies; zero is a skill-coverage issue).
    """
    findings: List[Finding] = []

    for task in snapshot.tasks:
        if task.max_concurrent < 1:
            findings.append(
                finding(
                    INVALID_CONCURRENT,
                    f"MaxConcurrent must be >= 1, got {task.max_concurrent}",
                    f"Task {task.task_id}",
                    field="MaxConcurrent",
                    subject=task.task_id,
                )
            )
            continue
        qualified = len(qualified_workers(snapshot, task.skill_set))
        if 0 < qualified < task.max_concurrent:
            findings.append(
                finding(
                    INVALID_CONCURRENT,
                    f"MaxConcurrent {task.max_concurrent} exceeds the {qualified} qualified worker(s)",
                    f"Task {task.task_id}",
                    field="MaxConcurrent",
                    subject=task.task_id,
                    severity=WARNING,
                )
            )

    for worker in snapshot.workers:
        if worker.max_load_per_phase < 1:
            findings.append(
                finding(
                    INVALID_LOAD,
                    f"MaxLoadPerPhase must be >= 1, got {worker.max_load_per_phase}",
                    f"Worker {worker.worker_id}",
                    field="MaxLoadPerPhase",
                    subject=worker.worker_id,
                )
            )
            continue
        if not worker.phases.ok or not worker.phases.value:
            continue
        available = len(worker.phases.value)
        if available < worker.max_load_per_phase:
            findings.append(
                finding(
                    OVERLOADED_WORKER,
                    f"MaxLoadPerPhase {worker.max_load_per_phase} exceeds the "
                    f"{available} available phase(s)",
                    f"Worker {worker.worker_id}",
                    field="MaxLoadPerPhase",
                    subject=worker.worker_id,
                )
            )
    return findings
