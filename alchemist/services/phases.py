"""Per-phase supply and demand accounting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from alchemist.config import AnalysisConfig
from alchemist.domain.records import PHASE_SATURATION, WARNING, AnalysisSnapshot, Finding, finding


@dataclass
class PhaseLoad:
    phase: int
    supplied_slots: int = 0
    required_duration: int = 0

    @property
    def utilization(self) -> float | None:
        if self.supplied_slots <= 0:
            return None
        return self.required_duration / self.supplied_slots

    @property
    def headroom(self) -> int:
        return self.supplied_slots - self.required_duration


def phase_capacity(snapshot: AnalysisSnapshot) -> Dict[int, PhaseLoad]:
    """
    Build phase -> PhaseLoad.

    Workers with malformed AvailableSlots and tasks with malformed
    PreferredPhases contribute nothing; their own findings come from the
    field-format checks.
    """
    loads: Dict[int, PhaseLoad] = {}

    def _get(phase: int) -> PhaseLoad:
        if phase not in loads:
            loads[phase] = PhaseLoad(phase)
        return loads[phase]

    for worker in snapshot.workers:
        if not worker.phases.ok:
            continue
        for phase in worker.phases.value:
            _get(phase).supplied_slots += max(worker.max_load_per_phase, 0)

    for task in snapshot.tasks:
        if not task.phases.ok:
            continue
        for phase in task.phases.value:
            _get(phase).required_duration += max(task.duration, 0)

    return dict(sorted(loads.items()))


def check_phase_saturation(snapshot: AnalysisSnapshot, cfg: AnalysisConfig) -> List[Finding]:
    findings: List[Finding] = []
    for phase, load in phase_capacity(snapshot).items():
        demand, supply = load.required_duration, load.supplied_slots
        if demand <= 0:
            continue
        if demand > supply:
            findings.append(
                finding(
                    PHASE_SATURATION,
                    f"Phase {phase}: insufficient slots (demand {demand} > supply {supply})",
                    f"Phase {phase}",
                    field="PreferredPhases",
                    subject=str(phase),
                )
            )
        elif demand >= cfg.saturation_warning_ratio * supply:
            percent = round(100 * load.utilization)
            findings.append(
                finding(
                    PHASE_SATURATION,
                    f"Phase {phase}: high utilization ({percent}%, demand {demand} of supply {supply})",
                    f"Phase {phase}",
                    field="PreferredPhases",
                    subject=str(phase),
                    severity=WARNING,
                )
            )
    return findings
