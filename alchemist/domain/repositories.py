"""Repository classes for data access."""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from .models import AnalysisRun, StoredFinding, StoredRule
from .records import ERROR, WARNING, AnalysisSnapshot, Finding, Rule


class RuleRepository:
    """Repository for the rule library."""

    @staticmethod
    def get_all(session: Session) -> List[Rule]:
        """Get all rules, active or not."""
        return [r.to_rule() for r in session.query(StoredRule).order_by(StoredRule.created_at, StoredRule.rule_id).all()]

    @staticmethod
    def get_active(session: Session) -> List[Rule]:
        """Get only the rules that take part in analysis."""
        rows = (
            session.query(StoredRule)
            .filter(StoredRule.active.is_(True))
            .order_by(StoredRule.created_at, StoredRule.rule_id)
            .all()
        )
        return [r.to_rule() for r in rows]

    @staticmethod
    def get_by_id(session: Session, rule_id: str) -> Optional[Rule]:
        """Get rule by ID."""
        row = session.query(StoredRule).filter(StoredRule.rule_id == rule_id).first()
        return row.to_rule() if row else None

    @staticmethod
    def save(session: Session, rule: Rule) -> Rule:
        """Create a rule, or replace the stored rule with the same ID."""
        session.merge(StoredRule.from_rule(rule))
        session.commit()
        return rule

    @staticmethod
    def bulk_save(session: Session, rules: Sequence[Rule]) -> int:
        """Create or replace multiple rules. Returns number saved."""
        for rule in rules:
            session.merge(StoredRule.from_rule(rule))
        session.commit()
        return len(rules)

    @staticmethod
    def set_active(session: Session, rule_id: str, active: bool) -> bool:
        """Toggle a rule. Returns False if no such rule exists."""
        row = session.query(StoredRule).filter(StoredRule.rule_id == rule_id).first()
        if row is None:
            return False
        row.active = active
        session.commit()
        return True

    @staticmethod
    def delete(session: Session, rule_id: str) -> int:
        """Delete a rule. Returns number of deleted rows."""
        count = session.query(StoredRule).filter(StoredRule.rule_id == rule_id).delete(synchronize_session=False)
        session.commit()
        return count


class AnalysisRunRepository:
    """Repository for recorded analysis runs."""

    @staticmethod
    def record(session: Session, snapshot: AnalysisSnapshot, findings: Sequence[Finding]) -> AnalysisRun:
        """Persist one run with its findings in order."""
        run = AnalysisRun(
            client_count=len(snapshot.clients),
            worker_count=len(snapshot.workers),
            task_count=len(snapshot.tasks),
            rule_count=len(snapshot.rules),
            error_count=sum(1 for f in findings if f.severity == ERROR),
            warning_count=sum(1 for f in findings if f.severity == WARNING),
        )
        run.findings = [
            StoredFinding(
                position=position,
                kind=f.kind,
                severity=f.severity,
                message=f.message,
                entity=f.entity,
                field=f.field,
                subject=f.subject,
            )
            for position, f in enumerate(findings)
        ]
        session.add(run)
        session.commit()
        session.refresh(run)
        return run

    @staticmethod
    def get_by_id(session: Session, run_id: int) -> Optional[AnalysisRun]:
        """Get run by ID."""
        return session.query(AnalysisRun).filter(AnalysisRun.id == run_id).first()

    @staticmethod
    def get_latest(session: Session) -> Optional[AnalysisRun]:
        """Get the most recent run."""
        return session.query(AnalysisRun).order_by(AnalysisRun.id.desc()).first()

    @staticmethod
    def get_findings(session: Session, run_id: int) -> List[Finding]:
        """Get the findings of a run, in their original order."""
        rows = (
            session.query(StoredFinding)
            .filter(StoredFinding.run_id == run_id)
            .order_by(StoredFinding.position)
            .all()
        )
        return [row.to_finding() for row in rows]
