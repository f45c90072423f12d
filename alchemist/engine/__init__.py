"""Analysis engine with independent analysis stages."""

from .analyzers import (
    DEFAULT_STAGES,
    CycleAnalyzer,
    FieldFormatAnalyzer,
    LoadAnalyzer,
    PhaseSaturationAnalyzer,
    ReferenceAnalyzer,
    RuleConflictAnalyzer,
    SchemaAnalyzer,
    SkillCoverageAnalyzer,
)
from .base import BaseAnalyzer
from .orchestrator import Orchestrator, analyze, derive_suggestions

__all__ = [
    "BaseAnalyzer",
    "SchemaAnalyzer",
    "ReferenceAnalyzer",
    "SkillCoverageAnalyzer",
    "FieldFormatAnalyzer",
    "LoadAnalyzer",
    "CycleAnalyzer",
    "RuleConflictAnalyzer",
    "PhaseSaturationAnalyzer",
    "DEFAULT_STAGES",
    "Orchestrator",
    "analyze",
    "derive_suggestions",
]
