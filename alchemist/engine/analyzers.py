"""Analysis stages, one per group of checks."""

from __future__ import annotations

from typing import List

from alchemist.config import AnalysisConfig
from alchemist.domain.records import AnalysisSnapshot, Finding
from alchemist.services.conflicts import check_rule_conflicts
from alchemist.services.coverage import check_skill_coverage
from alchemist.services.cycles import check_cycles
from alchemist.services.load import check_load
from alchemist.services.phases import check_phase_saturation
from alchemist.services.references import check_references
from alchemist.services.schema import check_field_formats, check_schema

from .base import BaseAnalyzer


class SchemaAnalyzer(BaseAnalyzer):
    """Missing and duplicate ids, priority and duration ranges."""

    name = "schema"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_schema(snapshot, cfg)


class ReferenceAnalyzer(BaseAnalyzer):
    name = "references"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_references(snapshot)


class SkillCoverageAnalyzer(BaseAnalyzer):
    name = "skill_coverage"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_skill_coverage(snapshot)


class FieldFormatAnalyzer(BaseAnalyzer):
    """AttributesJSON, AvailableSlots and PreferredPhases shapes."""

    name = "field_formats"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_field_formats(snapshot)


class LoadAnalyzer(BaseAnalyzer):
    name = "load"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_load(snapshot)


class CycleAnalyzer(BaseAnalyzer):
    name = "cycles"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_cycles(snapshot)


class RuleConflictAnalyzer(BaseAnalyzer):
    name = "rule_conflicts"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_rule_conflicts(snapshot)


class PhaseSaturationAnalyzer(BaseAnalyzer):
    name = "phase_saturation"

    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        return check_phase_saturation(snapshot, cfg)


# Presentation order of the merged findings
DEFAULT_STAGES = (
    SchemaAnalyzer,
    ReferenceAnalyzer,
    SkillCoverageAnalyzer,
    FieldFormatAnalyzer,
    LoadAnalyzer,
    CycleAnalyzer,
    RuleConflictAnalyzer,
    PhaseSaturationAnalyzer,
)
