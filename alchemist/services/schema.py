"""Schema integrity checks: identifiers, value ranges and field formats."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from alchemist.config import AnalysisConfig
from alchemist.domain.records import (
    DUPLICATE_ID,
    INVALID_DURATION,
    INVALID_JSON,
    INVALID_PHASES,
    INVALID_RANGE,
    INVALID_SLOTS,
    MISSING_ID,
    AnalysisSnapshot,
    Finding,
    finding,
)

# (label, id field, collection plural) per entity, in report order
ENTITIES = (
    ("Client", "ClientID", "Clients"),
    ("Worker", "WorkerID", "Workers"),
    ("Task", "TaskID", "Tasks"),
)


def _id_columns(snapshot: AnalysisSnapshot) -> List[List[str]]:
    return [
        [c.client_id for c in snapshot.clients],
        [w.worker_id for w in snapshot.workers],
        [t.task_id for t in snapshot.tasks],
    ]


def check_missing_ids(snapshot: AnalysisSnapshot) -> List[Finding]:
    findings: List[Finding] = []
    for (label, id_field, _), ids in zip(ENTITIES, _id_columns(snapshot)):
        for index, record_id in enumerate(ids):
            if not record_id.strip():
                findings.append(
                    finding(MISSING_ID, f"Missing {id_field}", f"{label} row {index + 1}", field=id_field)
                )
    return findings


def duplicate_positions(ids: Iterable[str]) -> List[Tuple[int, str]]:
    """Return (index, id) for every index whose non-blank id already appeared earlier."""
    seen = set()
    duplicates = []
    for index, record_id in enumerate(ids):
        record_id = record_id.strip()
        if not record_id:
            continue
        if record_id in seen:
            duplicates.append((index, record_id))
        else:
            seen.add(record_id)
    return duplicates


def check_duplicate_ids(snapshot: AnalysisSnapshot) -> List[Finding]:
    findings: List[Finding] = []
    for (_, id_field, plural), ids in zip(ENTITIES, _id_columns(snapshot)):
        for index, record_id in duplicate_positions(ids):
            findings.append(
                finding(
                    DUPLICATE_ID,
                    f"Duplicate {id_field}: {record_id} (row {index + 1})",
                    plural,
                    field=id_field,
                    subject=record_id,
                )
            )
    return findings


def check_ranges(snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
    """Client priority must fall in the configured range; task duration must be >= 1."""
    low, high = cfg.priority_range
    findings: List[Finding] = []
    for client in snapshot.clients:
        if client.priority_level < low or client.priority_level > high:
            findings.append(
                finding(
                    INVALID_RANGE,
                    f"PriorityLevel must be between {low}-{high}, got {client.priority_level}",
                    f"Client {client.client_id}",
                    field="PriorityLevel",
                    subject=client.client_id,
                )
            )
    for task in snapshot.tasks:
        if task.duration < 1:
            findings.append(
                finding(
                    INVALID_DURATION,
                    f"Duration must be >= 1, got {task.duration}",
                    f"Task {task.task_id}",
                    field="Duration",
                    subject=task.task_id,
                )
            )
    return findings


def check_schema(snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
    """Missing ids, duplicate ids, then range checks."""
    return check_missing_ids(snapshot) + check_duplicate_ids(snapshot) + check_ranges(snapshot, cfg)


def check_field_formats(snapshot: AnalysisSnapshot) -> List[Finding]:
    """Report JSON-shaped fields that did not parse when the records were built."""
    findings: List[Finding] = []
    for client in snapshot.clients:
        if client.attributes.present and not client.attributes.ok:
            findings.append(
                finding(
                    INVALID_JSON,
                    "Invalid JSON in AttributesJSON",
                    f"Client {client.client_id}",
                    field="AttributesJSON",
                    subject=client.client_id,
                )
            )
    for worker in snapshot.workers:
        if worker.phases.present and not worker.phases.ok:
            findings.append(
                finding(
                    INVALID_SLOTS,
                    f"AvailableSlots {worker.phases.error}: {worker.available_slots!r}",
                    f"Worker {worker.worker_id}",
                    field="AvailableSlots",
                    subject=worker.worker_id,
                )
            )
    for task in snapshot.tasks:
        if task.phases.present and not task.phases.ok:
            findings.append(
                finding(
                    INVALID_PHASES,
                    f"PreferredPhases {task.phases.error}: {task.preferred_phases!r}",
                    f"Task {task.task_id}",
                    field="PreferredPhases",
                    subject=task.task_id,
                )
            )
    return findings
