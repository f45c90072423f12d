"""SQLAlchemy models for the rule library and recorded analysis runs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship

from .records import Finding, Rule


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class StoredRule(Base):
    """A business rule kept in the rule library."""

    __tablename__ = "rules"

    rule_id = Column(String(100), primary_key=True)
    type = Column(String(30), nullable=False)  # coRun, loadLimit, phaseWindow, ...
    name = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=True)
    config = Column(JSON, nullable=False, default=dict)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    @classmethod
    def from_rule(cls, rule: Rule) -> "StoredRule":
        return cls(
            rule_id=rule.id,
            type=rule.type,
            name=rule.name,
            description=rule.description,
            config=dict(rule.config),
            active=rule.active,
        )

    def to_rule(self) -> Rule:
        return Rule(
            id=self.rule_id,
            type=self.type,
            config=dict(self.config or {}),
            active=bool(self.active),
            name=self.name or "",
            description=self.description or "",
        )

    def __repr__(self) -> str:
        return f"<StoredRule(id='{self.rule_id}', type='{self.type}', active={self.active})>"


class AnalysisRun(Base):
    """One recorded invocation of the analysis."""

    __tablename__ = "analysis_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    client_count = Column(Integer, nullable=False, default=0)
    worker_count = Column(Integer, nullable=False, default=0)
    task_count = Column(Integer, nullable=False, default=0)
    rule_count = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)
    warning_count = Column(Integer, nullable=False, default=0)

    findings = relationship(
        "StoredFinding",
        back_populates="run",
        order_by="StoredFinding.position",
        cascade="all, delete-orphan",
    )

    @property
    def status(self) -> str:
        return "errors_present" if self.error_count else "clean"

    def __repr__(self) -> str:
        return f"<AnalysisRun(id={self.id}, errors={self.error_count}, warnings={self.warning_count})>"


class StoredFinding(Base):
    """A finding belonging to a recorded run."""

    __tablename__ = "findings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Integer, ForeignKey("analysis_runs.id"), nullable=False)
    position = Column(Integer, nullable=False)
    kind = Column(String(40), nullable=False)
    severity = Column(String(10), nullable=False)  # error, warning
    message = Column(Text, nullable=False)
    entity = Column(String(200), nullable=False)
    field = Column(String(50), nullable=True)
    subject = Column(String(500), nullable=True)

    run = relationship("AnalysisRun", back_populates="findings")

    def to_finding(self) -> Finding:
        return Finding(
            kind=self.kind,
            message=self.message,
            entity=self.entity,
            severity=self.severity,
            field=self.field,
            subject=self.subject,
        )

    def __repr__(self) -> str:
        return f"<StoredFinding(run={self.run_id}, kind='{self.kind}', severity='{self.severity}')>"
