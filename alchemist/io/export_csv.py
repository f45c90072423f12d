"""Export cleaned data and the rules configuration."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import pandas as pd

from alchemist.config import DEFAULT_PRIORITIES
from alchemist.domain.records import AnalysisSnapshot, Client, Finding, Task, Worker
from alchemist.exceptions import ExportBlockedError
from alchemist.logger import logger

RULES_CONFIG_VERSION = "1.0"


def _records_frame(records: Sequence[Any], columns: Sequence[str]) -> pd.DataFrame:
    return pd.DataFrame([r.to_row() for r in records], columns=list(columns))


def export_clients_csv(path: str | Path, clients: Sequence[Client]) -> int:
    """Write clients to CSV. Returns number of rows written."""
    _records_frame(clients, Client.COLUMNS).to_csv(path, index=False)
    return len(clients)


def export_workers_csv(path: str | Path, workers: Sequence[Worker]) -> int:
    """Write workers to CSV. Returns number of rows written."""
    _records_frame(workers, Worker.COLUMNS).to_csv(path, index=False)
    return len(workers)


def export_tasks_csv(path: str | Path, tasks: Sequence[Task]) -> int:
    """Write tasks to CSV. Returns number of rows written."""
    _records_frame(tasks, Task.COLUMNS).to_csv(path, index=False)
    return len(tasks)


def build_rules_config(
    snapshot: AnalysisSnapshot,
    findings: Sequence[Finding],
    priorities: Mapping[str, int] | None = None,
) -> Dict[str, Any]:
    """
    Build the rules_config.json document.

    Only active rules are listed under ``configuration.rules``; the metadata
    counts every rule.
    """
    has_errors = any(f.is_error for f in findings)
    return {
        "version": RULES_CONFIG_VERSION,
        "generatedAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "configuration": {
            "priorities": dict(priorities if priorities is not None else DEFAULT_PRIORITIES),
            "rules": [rule.to_dict() for rule in snapshot.active_rules],
        },
        "metadata": {
            "totalClients": len(snapshot.clients),
            "totalWorkers": len(snapshot.workers),
            "totalTasks": len(snapshot.tasks),
            "totalRules": len(snapshot.rules),
            "validationStatus": "errors_present" if has_errors else "clean",
        },
    }


def export_bundle(
    out_dir: str | Path,
    snapshot: AnalysisSnapshot,
    findings: Sequence[Finding],
    priorities: Mapping[str, int] | None = None,
) -> Dict[str, Path]:
    """
    Write the cleaned CSVs and rules_config.json into ``out_dir``.

    Args:
        out_dir: Target directory (created if missing)
        snapshot: Data that was analyzed
        findings: Findings of that analysis
        priorities: Prioritization weights to embed in the rules config

    Returns:
        Dict of artifact name -> written path

    Raises:
        ExportBlockedError: If any error-severity finding is present
    """
    error_count = sum(1 for f in findings if f.is_error)
    if error_count:
        raise ExportBlockedError(error_count)

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths = {
        "clients": out / "clients_clean.csv",
        "workers": out / "workers_clean.csv",
        "tasks": out / "tasks_clean.csv",
        "rules": out / "rules_config.json",
    }
    export_clients_csv(paths["clients"], snapshot.clients)
    export_workers_csv(paths["workers"], snapshot.workers)
    export_tasks_csv(paths["tasks"], snapshot.tasks)
    document = build_rules_config(snapshot, findings, priorities)
    paths["rules"].write_text(json.dumps(document, indent=2), encoding="utf-8")

    logger.info("Exported %d artifacts to %s", len(paths), out)
    return paths
