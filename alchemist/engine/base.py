"""Base analyzer interface that all analysis stages must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from alchemist.config import AnalysisConfig
from alchemist.domain.records import AnalysisSnapshot, Finding


class BaseAnalyzer(ABC):
    """
    Abstract base class for one analysis stage.

    Each analyzer is a pure function of the snapshot and the configuration:
    it must not mutate either, and it must not depend on any other analyzer's
    output, so stages may run in any order or concurrently.
    """

    name: str | None = None  # Override in subclasses (e.g., "schema", "cycles")

    @abstractmethod
    def analyze(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        """
        Produce this stage's findings for the snapshot.

        Args:
            snapshot: Immutable clients/workers/tasks/rules snapshot
            cfg: AnalysisConfig with thresholds

        Returns:
            List of Finding objects, in this stage's deterministic order
        """
        pass

    def get_name(self) -> str:
        """Get the stage name used in logs."""
        return self.name or type(self).__name__
