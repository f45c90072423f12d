"""Validation and rule-consistency analysis for resource-allocation data.

Modules:
- config: analysis thresholds and priority weights (JSON or YAML)
- domain: typed records, wire-field parsing, SQLAlchemy persistence
- services: the individual checks and the suggestion engine
- engine: analyzer stages and the orchestrator behind analyze()
- io: CSV/XLSX ingestion and the cleaned-data export bundle
- report: pandas-backed findings summary
- cli: command-line interface entrypoints
"""

from alchemist.config import AnalysisConfig, load_config
from alchemist.domain.records import AnalysisSnapshot, Client, Finding, Rule, Suggestion, Task, Worker
from alchemist.engine.orchestrator import analyze, derive_suggestions

__all__ = [
    "analyze",
    "derive_suggestions",
    "AnalysisConfig",
    "load_config",
    "AnalysisSnapshot",
    "Client",
    "Worker",
    "Task",
    "Rule",
    "Finding",
    "Suggestion",
]
