"""Validation and rule-consistency checks."""

from .conflicts import check_rule_conflicts
from .coverage import check_skill_coverage
from .cycles import check_cycles, find_corun_cycles
from .load import check_load
from .phases import check_phase_saturation, phase_capacity
from .references import check_references
from .schema import check_field_formats, check_schema
from .suggestions import recommend_rules, suggest_from_findings

__all__ = [
    "check_schema",
    "check_references",
    "check_skill_coverage",
    "check_field_formats",
    "check_load",
    "check_cycles",
    "find_corun_cycles",
    "check_rule_conflicts",
    "check_phase_saturation",
    "phase_capacity",
    "suggest_from_findings",
    "recommend_rules",
]
