"""Domain records, persistence models and data access layer."""

from .models import AnalysisRun, Base, StoredFinding, StoredRule
from .records import AnalysisSnapshot, Client, Finding, Rule, Suggestion, Task, Worker
from .repositories import AnalysisRunRepository, RuleRepository

__all__ = [
    "Client",
    "Worker",
    "Task",
    "Rule",
    "Finding",
    "Suggestion",
    "AnalysisSnapshot",
    "Base",
    "StoredRule",
    "AnalysisRun",
    "StoredFinding",
    "RuleRepository",
    "AnalysisRunRepository",
]
