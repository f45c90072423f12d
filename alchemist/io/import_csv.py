"""CSV/XLSX import utilities producing typed records."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from alchemist.domain.records import Client, Rule, Task, Worker
from alchemist.exceptions import FileContentError, FileReadingError
from alchemist.logger import logger

EXPECTED_COLUMNS = {
    "clients": list(Client.COLUMNS),
    "workers": list(Worker.COLUMNS),
    "tasks": list(Task.COLUMNS),
}

# Common header spellings per canonical column (lower-case)
VARIATIONS = {
    "clientid": ["id", "client_id", "client id", "cid"],
    "clientname": ["name", "client_name", "client name", "company"],
    "prioritylevel": ["priority", "priority_level", "level", "importance"],
    "requestedtaskids": ["tasks", "task_ids", "task ids", "requested_tasks"],
    "grouptag": ["group", "group_tag", "category", "tag"],
    "attributesjson": ["attributes", "attributes_json", "metadata", "properties"],
    "workerid": ["id", "worker_id", "employee_id", "emp_id"],
    "workername": ["name", "worker_name", "employee_name", "emp_name"],
    "skills": ["skill", "skill_set", "capabilities", "expertise"],
    "availableslots": ["slots", "available_slots", "availability", "phases"],
    "maxloadperphase": ["max_load", "maxload", "capacity", "workload"],
    "workergroup": ["group", "worker_group", "team", "department"],
    "qualificationlevel": ["level", "qualification", "experience", "seniority"],
    "taskid": ["id", "task_id", "job_id", "work_id"],
    "taskname": ["name", "task_name", "job_name", "title"],
    "category": ["type", "category", "classification", "domain"],
    "duration": ["time", "duration", "length", "period"],
    "requiredskills": ["skills", "required_skills", "prerequisites", "expertise"],
    "preferredphases": ["phases", "preferred_phases", "timeline", "schedule"],
    "maxconcurrent": ["concurrent", "max_concurrent", "parallel", "simultaneous"],
}

RECORD_TYPES = {"clients": Client, "workers": Worker, "tasks": Task}


def _letters(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


def map_columns(headers: Sequence[str], entity: str) -> Dict[str, str]:
    """
    Map canonical column names to the headers found in a file.

    Tries, per canonical column: exact (case-insensitive) match, then a fuzzy
    match on letters only, then the known spelling variations. A header is
    used for at most one column.

    Args:
        headers: Headers as read from the file
        entity: "clients", "workers" or "tasks"

    Returns:
        Dict of canonical column -> file header (unmapped columns omitted)
    """
    if entity not in EXPECTED_COLUMNS:
        raise ValueError(f"Unknown entity {entity!r}, expected one of {sorted(EXPECTED_COLUMNS)}")
    mapping: Dict[str, str] = {}
    used = set()

    def free() -> List[str]:
        return [h for h in headers if h not in used]

    for column in EXPECTED_COLUMNS[entity]:
        key = column.lower()
        match = next((h for h in free() if h.strip().lower() == key), None)
        if match is None:
            match = next((h for h in free() if _letters(h) and _letters(h) == _letters(key)), None)
        if match is None:
            for variation in VARIATIONS.get(key, []):
                match = next((h for h in free() if h.strip().lower() == variation), None)
                if match is not None:
                    break
        if match is not None:
            mapping[column] = match
            used.add(match)
    return mapping


def read_table(path: str | Path) -> pd.DataFrame:
    """Read a CSV or XLSX file as strings, with empty cells as ''."""
    p = Path(path)
    try:
        if p.suffix.lower() in (".xlsx", ".xls"):
            df = pd.read_excel(p, dtype=str, keep_default_na=False)
        else:
            df = pd.read_csv(p, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise FileReadingError(f"Could not read {p}: {e}") from e
    df.columns = [str(c).strip() for c in df.columns]
    return df


def load_rows(path: str | Path, entity: str) -> List[Dict[str, Any]]:
    """Load a file as row dicts keyed by canonical column names."""
    df = read_table(path)
    mapping = map_columns(list(df.columns), entity)
    id_column = EXPECTED_COLUMNS[entity][0]
    if id_column not in mapping:
        raise FileContentError(f"{path}: no column could be mapped to {id_column}")
    unmapped = [c for c in EXPECTED_COLUMNS[entity] if c not in mapping]
    if unmapped:
        logger.warning("%s: no column found for %s", path, ", ".join(unmapped))

    df = df[list(mapping.values())].rename(columns={v: k for k, v in mapping.items()})
    rows = df.to_dict(orient="records")
    logger.info("Loaded %d %s from %s", len(rows), entity, path)
    return rows


def load_records(path: str | Path, entity: str) -> list:
    record_type = RECORD_TYPES[entity]
    return [record_type.from_row(row) for row in load_rows(path, entity)]


def load_clients(path: str | Path) -> List[Client]:
    return load_records(path, "clients")


def load_workers(path: str | Path) -> List[Worker]:
    return load_records(path, "workers")


def load_tasks(path: str | Path) -> List[Task]:
    return load_records(path, "tasks")


def load_rules(path: str | Path) -> List[Rule]:
    """
    Load rules from JSON.

    Accepts a plain list of rule objects, ``{"rules": [...]}``, or an exported
    ``rules_config.json`` (``{"configuration": {"rules": [...]}}``).
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise FileReadingError(f"Could not read rules from {p}: {e}") from e

    if isinstance(data, dict):
        section = data.get("configuration", data)
        data = section.get("rules") if isinstance(section, dict) else None
    if not isinstance(data, list):
        raise FileContentError(f"{p}: expected a list of rules")
    rules = []
    for item in data:
        if not isinstance(item, dict):
            raise FileContentError(f"{p}: rule entries must be objects, got {type(item).__name__}")
        rules.append(Rule.from_dict(item))
    logger.info("Loaded %d rules from %s", len(rules), p)
    return rules
