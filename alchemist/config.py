"""Analysis configuration, loaded from JSON or YAML."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml


DEFAULT_PRIORITIES = {
    "fulfillment": 3,
    "fairness": 3,
    "priority": 3,
    "efficiency": 3,
    "workload": 3,
}


@dataclass
class AnalysisConfig:
    priority_range: Tuple[int, int] = (1, 5)
    # Utilization at or above this share of supply is reported as a warning
    saturation_warning_ratio: float = 0.8
    high_load_threshold: int = 10
    co_run_pair_min_count: int = 2
    parallel: bool = False
    max_workers: int | None = None
    priorities: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRIORITIES))
    log_level: str = "INFO"
    log_path: str | None = None

    def __post_init__(self) -> None:
        low, high = (int(x) for x in self.priority_range)
        if low > high:
            raise ValueError(f"priority_range must be ascending, got {self.priority_range}")
        self.priority_range = (low, high)
        if not 0.0 < float(self.saturation_warning_ratio) <= 1.0:
            raise ValueError(
                f"saturation_warning_ratio must be in (0, 1], got {self.saturation_warning_ratio}"
            )
        if self.co_run_pair_min_count < 1:
            raise ValueError("co_run_pair_min_count must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["priority_range"] = list(self.priority_range)
        return data


def load_config(path: str | Path | None = None) -> AnalysisConfig:
    """
    Load an AnalysisConfig from a JSON or YAML file.

    Args:
        path: Config file path; None returns the defaults

    Returns:
        AnalysisConfig

    Raises:
        ValueError: If the file holds unknown keys or invalid values
    """
    if path is None:
        return AnalysisConfig()
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        raw = json.loads(text) if text.strip() else {}
    else:
        raw = yaml.safe_load(text) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config {p} must contain a mapping, got {type(raw).__name__}")

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {p}: {', '.join(unknown)}")

    if "priorities" in raw:
        priorities = dict(DEFAULT_PRIORITIES)
        priorities.update({str(k): int(v) for k, v in (raw["priorities"] or {}).items()})
        raw["priorities"] = priorities
    if "priority_range" in raw:
        raw["priority_range"] = tuple(raw["priority_range"])
    return AnalysisConfig(**raw)
