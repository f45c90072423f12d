"""Skill coverage: skills required by tasks that no worker possesses."""

from __future__ import annotations

from typing import List

from alchemist.domain.records import MISSING_SKILL, AnalysisSnapshot, Finding, Worker, finding


def required_skills(snapshot: AnalysisSnapshot) -> List[str]:
    """All required skills across tasks, in first-seen order."""
    ordered: List[str] = []
    seen = set()
    for task in snapshot.tasks:
        for skill in task.skill_list:
            if skill not in seen:
                seen.add(skill)
                ordered.append(skill)
    return ordered


def possessed_skills(snapshot: AnalysisSnapshot) -> set:
    skills = set()
    for worker in snapshot.workers:
        skills |= worker.skill_set
    return skills


def missing_skills(snapshot: AnalysisSnapshot) -> List[str]:
    possessed = possessed_skills(snapshot)
    return [skill for skill in required_skills(snapshot) if skill not in possessed]


def qualified_workers(snapshot: AnalysisSnapshot, skills: frozenset) -> List[Worker]:
    """Workers holding every skill in ``skills``."""
    return [worker for worker in snapshot.workers if skills <= worker.skill_set]


def check_skill_coverage(snapshot: AnalysisSnapshot) -> List[Finding]:
    return [
        finding(
            MISSING_SKILL,
            f"No worker has required skill: {skill}",
            "Skills Coverage",
            field="RequiredSkills",
            subject=skill,
        )
        for skill in missing_skills(snapshot)
    ]
