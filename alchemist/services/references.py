"""Cross-entity reference checks."""

from __future__ import annotations

from typing import Dict, List

from alchemist.domain.records import UNKNOWN_REFERENCE, AnalysisSnapshot, Finding, finding


def unknown_task_references(snapshot: AnalysisSnapshot) -> Dict[int, List[str]]:
    """Map client index -> requested task ids that resolve to no task."""
    known = snapshot.task_ids
    unresolved: Dict[int, List[str]] = {}
    for index, client in enumerate(snapshot.clients):
        missing = [task_id for task_id in client.requested_tasks if task_id not in known]
        if missing:
            unresolved[index] = missing
    return unresolved


def check_references(snapshot: AnalysisSnapshot) -> List[Finding]:
    findings: List[Finding] = []
    for index, missing in unknown_task_references(snapshot).items():
        client = snapshot.clients[index]
        for task_id in missing:
            findings.append(
                finding(
                    UNKNOWN_REFERENCE,
                    f"Referenced TaskID '{task_id}' does not exist",
                    f"Client {client.client_id}",
                    field="RequestedTaskIDs",
                    subject=task_id,
                )
            )
    return findings
