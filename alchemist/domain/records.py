"""Typed records for clients, workers, tasks, rules and analysis output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from alchemist.logger import logger

from .fields import (
    FieldParse,
    as_int,
    as_text,
    coerce_phase_list,
    parse_json_blob,
    parse_phase_array,
    parse_phase_spec,
    split_list,
)

ERROR = "error"
WARNING = "warning"

MISSING_ID = "missing_id"
DUPLICATE_ID = "duplicate_id"
INVALID_RANGE = "invalid_range"
INVALID_DURATION = "invalid_duration"
INVALID_CONCURRENT = "invalid_concurrent"
INVALID_LOAD = "invalid_load"
INVALID_JSON = "invalid_json"
INVALID_SLOTS = "invalid_slots"
INVALID_PHASES = "invalid_phases"
UNKNOWN_REFERENCE = "unknown_reference"
MISSING_SKILL = "missing_skill"
CIRCULAR_CORUN = "circular_corun"
CONFLICTING_RULES = "conflicting_rules"
PHASE_SATURATION = "phase_saturation"
OVERLOADED_WORKER = "overloaded_worker"

DEFAULT_SEVERITY = {
    MISSING_ID: ERROR,
    DUPLICATE_ID: ERROR,
    INVALID_RANGE: ERROR,
    INVALID_DURATION: ERROR,
    INVALID_CONCURRENT: ERROR,
    INVALID_LOAD: ERROR,
    INVALID_JSON: ERROR,
    INVALID_SLOTS: ERROR,
    INVALID_PHASES: ERROR,
    UNKNOWN_REFERENCE: ERROR,
    MISSING_SKILL: WARNING,
    CIRCULAR_CORUN: ERROR,
    CONFLICTING_RULES: ERROR,
    PHASE_SATURATION: ERROR,
    OVERLOADED_WORKER: WARNING,
}

CO_RUN = "coRun"
LOAD_LIMIT = "loadLimit"
PHASE_WINDOW = "phaseWindow"
SLOT_RESTRICTION = "slotRestriction"
PRECEDENCE = "precedence"
SKILL_MATCH = "skillMatch"
RULE_TYPES = {CO_RUN, LOAD_LIMIT, PHASE_WINDOW, SLOT_RESTRICTION, PRECEDENCE, SKILL_MATCH}


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "t", "1", "yes")
    return bool(value)


def _quarantine(entity: str, row: Mapping[str, Any], known: Iterable[str]) -> None:
    unknown = sorted(set(row) - set(known), key=str)
    if unknown:
        logger.debug("Ignoring unrecognized %s columns: %s", entity, ", ".join(map(str, unknown)))


@dataclass(frozen=True)
class Client:
    client_id: str
    client_name: str = ""
    priority_level: int = 0
    requested_task_ids: str = ""
    group_tag: str = ""
    attributes_json: str = ""
    requested_tasks: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    attributes: FieldParse = field(init=False, repr=False, compare=False)

    COLUMNS = ("ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag", "AttributesJSON")

    def __post_init__(self) -> None:
        object.__setattr__(self, "requested_tasks", split_list(self.requested_task_ids))
        object.__setattr__(self, "attributes", parse_json_blob(self.attributes_json))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Client":
        _quarantine("client", row, cls.COLUMNS)
        return cls(
            client_id=as_text(row.get("ClientID")).strip(),
            client_name=as_text(row.get("ClientName")),
            priority_level=as_int(row.get("PriorityLevel")),
            requested_task_ids=as_text(row.get("RequestedTaskIDs")),
            group_tag=as_text(row.get("GroupTag")),
            attributes_json=as_text(row.get("AttributesJSON")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "ClientID": self.client_id,
            "ClientName": self.client_name,
            "PriorityLevel": self.priority_level,
            "RequestedTaskIDs": self.requested_task_ids,
            "GroupTag": self.group_tag,
            "AttributesJSON": self.attributes_json,
        }


@dataclass(frozen=True)
class Worker:
    worker_id: str
    worker_name: str = ""
    skills: str = ""
    available_slots: str = ""
    max_load_per_phase: int = 0
    worker_group: str = ""
    qualification_level: str = ""
    skill_set: FrozenSet[str] = field(init=False, repr=False, compare=False)
    phases: FieldParse = field(init=False, repr=False, compare=False)

    COLUMNS = (
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPhase",
        "WorkerGroup",
        "QualificationLevel",
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "skill_set", frozenset(split_list(self.skills)))
        if self.available_slots.strip():
            phases = parse_phase_array(self.available_slots)
        else:
            phases = FieldParse(self.available_slots, ())
        object.__setattr__(self, "phases", phases)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Worker":
        _quarantine("worker", row, cls.COLUMNS)
        return cls(
            worker_id=as_text(row.get("WorkerID")).strip(),
            worker_name=as_text(row.get("WorkerName")),
            skills=as_text(row.get("Skills")),
            available_slots=as_text(row.get("AvailableSlots")),
            max_load_per_phase=as_int(row.get("MaxLoadPerPhase")),
            worker_group=as_text(row.get("WorkerGroup")),
            qualification_level=as_text(row.get("QualificationLevel")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "WorkerID": self.worker_id,
            "WorkerName": self.worker_name,
            "Skills": self.skills,
            "AvailableSlots": self.available_slots,
            "MaxLoadPerPhase": self.max_load_per_phase,
            "WorkerGroup": self.worker_group,
            "QualificationLevel": self.qualification_level,
        }


@dataclass(frozen=True)
class Task:
    task_id: str
    task_name: str = ""
    category: str = ""
    duration: int = 0
    required_skills: str = ""
    preferred_phases: str = ""
    max_concurrent: int = 0
    skill_set: FrozenSet[str] = field(init=False, repr=False, compare=False)
    skill_list: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    phases: FieldParse = field(init=False, repr=False, compare=False)

    COLUMNS = (
        "TaskID",
        "TaskName",
        "Category",
        "Duration",
        "RequiredSkills",
        "PreferredPhases",
        "MaxConcurrent",
    )

    def __post_init__(self) -> None:
        skills = split_list(self.required_skills)
        object.__setattr__(self, "skill_list", skills)
        object.__setattr__(self, "skill_set", frozenset(skills))
        if self.preferred_phases.strip():
            phases = parse_phase_spec(self.preferred_phases)
        else:
            phases = FieldParse(self.preferred_phases, ())
        object.__setattr__(self, "phases", phases)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Task":
        _quarantine("task", row, cls.COLUMNS)
        return cls(
            task_id=as_text(row.get("TaskID")).strip(),
            task_name=as_text(row.get("TaskName")),
            category=as_text(row.get("Category")),
            duration=as_int(row.get("Duration")),
            required_skills=as_text(row.get("RequiredSkills")),
            preferred_phases=as_text(row.get("PreferredPhases")),
            max_concurrent=as_int(row.get("MaxConcurrent")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "TaskID": self.task_id,
            "TaskName": self.task_name,
            "Category": self.category,
            "Duration": self.duration,
            "RequiredSkills": self.required_skills,
            "PreferredPhases": self.preferred_phases,
            "MaxConcurrent": self.max_concurrent,
        }


@dataclass(frozen=True)
class Rule:
    """A business rule. ``config`` keeps the wire keys (``tasks``, ``taskId`` ...)."""

    id: str
    type: str
    config: Mapping[str, Any] = field(default_factory=dict, compare=False)
    active: bool = True
    name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        rule_type = as_text(data.get("type"))
        if rule_type not in RULE_TYPES:
            logger.warning("Rule %s has unknown type %r", data.get("id"), rule_type)
        config = data.get("config") or {}
        if not isinstance(config, Mapping):
            config = {}
        return cls(
            id=as_text(data.get("id")),
            type=rule_type,
            config=dict(config),
            active=_as_flag(data.get("active", True)),
            name=as_text(data.get("name")),
            description=as_text(data.get("description")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "config": dict(self.config),
            "active": self.active,
        }

    @property
    def corun_tasks(self) -> Tuple[str, ...]:
        """Distinct task ids of a coRun rule, in configured order."""
        tasks = self.config.get("tasks") or []
        if isinstance(tasks, str):
            tasks = split_list(tasks)
        elif not isinstance(tasks, (list, tuple)):
            logger.warning("coRun rule %s has non-list tasks %r, ignoring them", self.id, tasks)
            return ()
        seen: List[str] = []
        for task in tasks:
            task = as_text(task).strip()
            if task and task not in seen:
                seen.append(task)
        return tuple(seen)

    @property
    def window_task(self) -> str:
        return as_text(self.config.get("taskId")).strip()

    @property
    def allowed_phases(self) -> Optional[Tuple[int, ...]]:
        """Phases allowed by a phaseWindow rule, or None if malformed."""
        return coerce_phase_list(self.config.get("allowedPhases", []))

    @property
    def worker_group(self) -> str:
        return as_text(self.config.get("workerGroup")).strip()

    @property
    def max_slots(self) -> int:
        return as_int(self.config.get("maxSlots"))


@dataclass(frozen=True)
class Finding:
    kind: str
    message: str
    entity: str
    severity: str
    field: Optional[str] = None
    subject: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "message": self.message,
            "entity": self.entity,
            "field": self.field,
            "severity": self.severity,
            "subject": self.subject,
        }


def finding(kind: str, message: str, entity: str, field: Optional[str] = None,
            subject: Optional[str] = None, severity: Optional[str] = None) -> Finding:
    """Build a Finding with the kind's default severity unless one is given."""
    return Finding(
        kind=kind,
        message=message,
        entity=entity,
        severity=severity or DEFAULT_SEVERITY[kind],
        field=field,
        subject=subject,
    )


@dataclass
class Suggestion:
    kind: str
    message: str
    action: str
    data: Dict[str, Any] = field(default_factory=dict)
    finding_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "message": self.message,
            "action": self.action,
            "data": self.data,
            "findingCount": self.finding_count,
        }


def _as_records(items: Optional[Iterable[Any]], record_type) -> Tuple[Any, ...]:
    if not items:
        return ()
    records = []
    for item in items:
        if isinstance(item, record_type):
            records.append(item)
        elif not isinstance(item, Mapping):
            logger.warning("Skipping %s input that is not a mapping: %r", record_type.__name__, item)
        elif record_type is Rule:
            records.append(Rule.from_dict(item))
        else:
            records.append(record_type.from_row(item))
    return tuple(records)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Immutable input of one analysis run."""

    clients: Tuple[Client, ...] = ()
    workers: Tuple[Worker, ...] = ()
    tasks: Tuple[Task, ...] = ()
    rules: Tuple[Rule, ...] = ()

    @classmethod
    def build(
        cls,
        clients: Optional[Sequence[Any]] = None,
        workers: Optional[Sequence[Any]] = None,
        tasks: Optional[Sequence[Any]] = None,
        rules: Optional[Sequence[Any]] = None,
    ) -> "AnalysisSnapshot":
        """Build a snapshot from records or raw row mappings."""
        return cls(
            clients=_as_records(clients, Client),
            workers=_as_records(workers, Worker),
            tasks=_as_records(tasks, Task),
            rules=_as_records(rules, Rule),
        )

    @property
    def active_rules(self) -> Tuple[Rule, ...]:
        return tuple(rule for rule in self.rules if rule.active)

    def rules_of_type(self, rule_type: str) -> List[Rule]:
        return [rule for rule in self.active_rules if rule.type == rule_type]

    @property
    def task_ids(self) -> FrozenSet[str]:
        return frozenset(task.task_id for task in self.tasks if task.task_id)
