"""Command-line interface for the data alchemist analysis engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from alchemist.config import AnalysisConfig, load_config
from alchemist.domain.db import DEFAULT_DB_URL, get_session, init_database, session_scope
from alchemist.domain.records import AnalysisSnapshot
from alchemist.domain.repositories import AnalysisRunRepository, RuleRepository
from alchemist.engine.orchestrator import Orchestrator
from alchemist.exceptions import ExportBlockedError
from alchemist.io.export_csv import export_bundle
from alchemist.io.import_csv import load_clients, load_rules, load_tasks, load_workers
from alchemist.logger import configure_logging
from alchemist.report import has_blocking_errors, print_analysis_report
from alchemist.services.suggestions import derive_suggestions_for


def _load_cfg(args: argparse.Namespace) -> AnalysisConfig:
    cfg = load_config(args.config)
    configure_logging(cfg.log_level, cfg.log_path)
    return cfg


def _load_snapshot(args: argparse.Namespace) -> AnalysisSnapshot:
    """Read the input files; rules come from --rules, else from the rule library when --db is set."""
    clients = load_clients(args.clients) if args.clients else []
    workers = load_workers(args.workers) if args.workers else []
    tasks = load_tasks(args.tasks) if args.tasks else []
    if args.rules:
        rules = load_rules(args.rules)
    elif args.db:
        with session_scope(args.db) as session:
            rules = RuleRepository.get_all(session)
    else:
        rules = []
    return AnalysisSnapshot.build(clients, workers, tasks, rules)


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = args.db or DEFAULT_DB_URL
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_import_rules(args: argparse.Namespace) -> None:
    """Import rules from JSON into the rule library."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)

    try:
        rules = load_rules(args.rules)
        count = RuleRepository.bulk_save(session, rules)
        session.close()
        print(f"[OK] Imported {count} rules into {db_url}")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_analyze(args: argparse.Namespace) -> None:
    """Run the analysis and print the report."""
    cfg = _load_cfg(args)
    snapshot = _load_snapshot(args)
    findings = Orchestrator().run(snapshot, cfg)
    print_analysis_report(findings)

    if args.json:
        Path(args.json).write_text(json.dumps([f.to_dict() for f in findings], indent=2), encoding="utf-8")
        print(f"[OK] Wrote {len(findings)} findings to {args.json}")

    if args.db:
        try:
            with session_scope(args.db) as session:
                run = AnalysisRunRepository.record(session, snapshot, findings)
                print(f"[OK] Recorded analysis run {run.id} ({run.status})")
        except Exception as e:
            print(f"[ERROR] Could not record run: {e}")
            raise

    if args.fail_on_error and has_blocking_errors(findings):
        sys.exit(1)


def _cmd_suggest(args: argparse.Namespace) -> None:
    """Run the analysis and print suggestions."""
    cfg = _load_cfg(args)
    snapshot = _load_snapshot(args)
    findings = Orchestrator().run(snapshot, cfg)
    suggestions = derive_suggestions_for(findings, snapshot, cfg)

    if not suggestions:
        print("[OK] No suggestions")
    for s in suggestions:
        print(f"[{s.kind}] {s.message}")
        print(f"    -> {s.action}")

    if args.json:
        Path(args.json).write_text(json.dumps([s.to_dict() for s in suggestions], indent=2), encoding="utf-8")
        print(f"[OK] Wrote {len(suggestions)} suggestions to {args.json}")


def _cmd_export(args: argparse.Namespace) -> None:
    """Export cleaned CSVs and rules_config.json."""
    cfg = _load_cfg(args)
    snapshot = _load_snapshot(args)
    findings = Orchestrator().run(snapshot, cfg)

    try:
        paths = export_bundle(args.out_dir, snapshot, findings, cfg.priorities)
    except ExportBlockedError as e:
        print(f"[ERROR] {e}")
        sys.exit(1)

    for name, path in paths.items():
        print(f"[OK] Exported {name} to {path}")


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--clients", help="Path to clients CSV/XLSX")
    parser.add_argument("--workers", help="Path to workers CSV/XLSX")
    parser.add_argument("--tasks", help="Path to tasks CSV/XLSX")
    parser.add_argument("--rules", help="Path to rules JSON (default: rule library when --db is given)")
    parser.add_argument("--config", help="Path to config YAML/JSON (optional)")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="alchemist",
        description="Validation and rule-consistency analysis for resource-allocation data",
    )

    parser.add_argument("--db", help=f"Database URL (init-db/import-rules default: {DEFAULT_DB_URL})")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    imp = sub.add_parser("import-rules", help="Import rules JSON into the rule library")
    imp.add_argument("--rules", required=True, help="Path to rules JSON")
    imp.set_defaults(func=_cmd_import_rules)

    ana = sub.add_parser("analyze", help="Validate data and check rule consistency")
    _add_input_args(ana)
    ana.add_argument("--json", help="Optional: write findings to a JSON file")
    ana.add_argument("--fail-on-error", action="store_true", help="Exit with status 1 if errors are found")
    ana.set_defaults(func=_cmd_analyze)

    sug = sub.add_parser("suggest", help="Derive fix suggestions and rule recommendations")
    _add_input_args(sug)
    sug.add_argument("--json", help="Optional: write suggestions to a JSON file")
    sug.set_defaults(func=_cmd_suggest)

    exp = sub.add_parser("export", help="Export cleaned data and rules_config.json")
    _add_input_args(exp)
    exp.add_argument("--out-dir", required=True, help="Output directory")
    exp.set_defaults(func=_cmd_export)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
