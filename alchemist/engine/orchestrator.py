"""Orchestrator - runs every analysis stage and merges their findings."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Sequence

from alchemist.config import AnalysisConfig
from alchemist.domain.records import ERROR, WARNING, AnalysisSnapshot, Finding, Suggestion
from alchemist.logger import logger
from alchemist.services.suggestions import derive_suggestions_for

from .analyzers import DEFAULT_STAGES
from .base import BaseAnalyzer


class Orchestrator:
    """
    Orchestrator coordinates the analysis stages.

    Stages are independent pure functions of the snapshot, so they may run
    sequentially or on a thread pool; either way the merged list follows the
    stage order, which keeps the output deterministic.
    """

    def __init__(self, analyzers: Sequence[BaseAnalyzer] | None = None):
        """
        Initialize orchestrator with its stages.

        Args:
            analyzers: Stages in presentation order (default: all built-in stages)
        """
        self.analyzers: List[BaseAnalyzer] = (
            list(analyzers) if analyzers is not None else [stage() for stage in DEFAULT_STAGES]
        )

    def _run_stage(self, analyzer: BaseAnalyzer, snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
        try:
            findings = analyzer.analyze(snapshot, cfg)
        except Exception:
            logger.error("%s analyzer failed", analyzer.get_name())
            raise
        logger.debug("%s analyzer produced %d finding(s)", analyzer.get_name(), len(findings))
        return findings

    def run(self, snapshot: AnalysisSnapshot, cfg: AnalysisConfig | None = None) -> List[Finding]:
        """
        Run all stages over the snapshot.

        Args:
            snapshot: Immutable analysis input
            cfg: AnalysisConfig (defaults when None)

        Returns:
            Merged list of findings in stage order
        """
        cfg = cfg or AnalysisConfig()
        if cfg.parallel and len(self.analyzers) > 1:
            with ThreadPoolExecutor(max_workers=cfg.max_workers) as pool:
                results = list(pool.map(lambda a: self._run_stage(a, snapshot, cfg), self.analyzers))
        else:
            results = [self._run_stage(analyzer, snapshot, cfg) for analyzer in self.analyzers]

        findings: List[Finding] = []
        for stage_findings in results:
            findings.extend(stage_findings)

        errors = sum(1 for f in findings if f.severity == ERROR)
        warnings = sum(1 for f in findings if f.severity == WARNING)
        logger.info(
            "Analyzed %d clients, %d workers, %d tasks, %d rules: %d error(s), %d warning(s)",
            len(snapshot.clients),
            len(snapshot.workers),
            len(snapshot.tasks),
            len(snapshot.rules),
            errors,
            warnings,
        )
        return findings


def analyze(
    clients: Sequence[Any] | None = None,
    workers: Sequence[Any] | None = None,
    tasks: Sequence[Any] | None = None,
    rules: Sequence[Any] | None = None,
    cfg: AnalysisConfig | None = None,
) -> List[Finding]:
    """
    Run the full validation and rule-consistency analysis.

    Records may be typed records or raw row mappings keyed by the wire column
    names (``ClientID``, ``PriorityLevel`` ...). Inputs are never mutated and
    nothing is kept between calls.

    Returns:
        List of findings, ordered schema -> references -> skill coverage ->
        field formats -> concurrency/load -> cycles -> rule conflicts -> phase
        saturation
    """
    snapshot = AnalysisSnapshot.build(clients, workers, tasks, rules)
    return Orchestrator().run(snapshot, cfg)


def derive_suggestions(
    findings: Sequence[Finding],
    clients: Sequence[Any] | None = None,
    workers: Sequence[Any] | None = None,
    tasks: Sequence[Any] | None = None,
    rules: Sequence[Any] | None = None,
    cfg: AnalysisConfig | None = None,
) -> List[Suggestion]:
    """
    Derive advisory suggestions from a findings list.

    One suggestion per actionable finding kind, followed by rule
    recommendations mined from the request patterns. Suggestions are never
    applied here; re-run ``analyze`` after applying one.
    """
    snapshot = AnalysisSnapshot.build(clients, workers, tasks, rules)
    return derive_suggestions_for(findings, snapshot, cfg or AnalysisConfig())
