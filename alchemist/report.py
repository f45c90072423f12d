from __future__ import annotations

from typing import Sequence

import pandas as pd

from alchemist.domain.records import ERROR, WARNING, Finding, Suggestion

FINDING_COLUMNS = ["type", "severity", "entity", "field", "subject", "message"]


def findings_frame(findings: Sequence[Finding]) -> pd.DataFrame:
    """One row per finding, in analysis order."""
    return pd.DataFrame([f.to_dict() for f in findings], columns=FINDING_COLUMNS)


def has_blocking_errors(findings: Sequence[Finding]) -> bool:
    return any(f.severity == ERROR for f in findings)


def summarize_findings(findings: Sequence[Finding]) -> str:
    if not findings:
        return "No findings."
    df = findings_frame(findings)

    counts = df.groupby(["type", "severity"], sort=True).size().unstack(fill_value=0)
    entities = df.groupby("entity", sort=True).size().sort_values(ascending=False)

    lines = ["Findings per type and severity:"]
    lines.append(counts.to_string())
    lines.append("")
    lines.append("Findings per entity:")
    lines.append(entities.to_string())
    return "\n".join(lines)


def print_analysis_report(findings: Sequence[Finding], suggestions: Sequence[Suggestion] = ()) -> None:
    """Print findings and suggestions in a readable format."""
    errors = [f for f in findings if f.severity == ERROR]
    warnings = [f for f in findings if f.severity == WARNING]

    print("\n" + "=" * 70)
    print("ANALYSIS REPORT")
    print("=" * 70)

    if errors:
        print("Status: ERRORS PRESENT (export blocked)")
    else:
        print("Status: CLEAN")

    if errors:
        print(f"\nErrors ({len(errors)}):")
        for f in errors:
            print(f"  [x] {f.entity}: {f.message}")

    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for f in warnings:
            print(f"  [!] {f.entity}: {f.message}")

    if suggestions:
        print(f"\nSuggestions ({len(suggestions)}):")
        for s in suggestions:
            print(f"  - {s.message}")
            print(f"    -> {s.action}")

    if findings:
        print("")
        print(summarize_findings(findings))

    print("=" * 70 + "\n")
