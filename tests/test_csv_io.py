"""Tests for CSV/XLSX import and export functionality."""

import json

import pandas as pd
import pytest

from alchemist import analyze
from alchemist.domain.records import AnalysisSnapshot
from alchemist.exceptions import ExportBlockedError, FileContentError, FileReadingError
from alchemist.io.export_csv import build_rules_config, export_bundle
from alchemist.io.import_csv import load_clients, load_rules, load_tasks, load_workers, map_columns


def test_map_columns_exact_and_fuzzy():
    mapping = map_columns(["clientid", "Client Name", "Priority_Level"], "clients")
    assert mapping == {"ClientID": "clientid", "ClientName": "Client Name", "PriorityLevel": "Priority_Level"}


def test_map_columns_variations():
    mapping = map_columns(["id", "name", "priority", "tasks", "group", "attributes"], "clients")
    assert mapping == {
        "ClientID": "id",
        "ClientName": "name",
        "PriorityLevel": "priority",
        "RequestedTaskIDs": "tasks",
        "GroupTag": "group",
        "AttributesJSON": "attributes",
    }


def test_map_columns_uses_each_header_once():
    mapping = map_columns(["TaskID", "skills", "phases"], "tasks")
    assert mapping == {"TaskID": "TaskID", "RequiredSkills": "skills", "PreferredPhases": "phases"}


def test_map_columns_unknown_entity():
    with pytest.raises(ValueError):
        map_columns(["id"], "projects")


def test_load_clients_csv(tmp_path):
    csv_content = """ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON,Notes
C1,Acme,3,"T1,T2",G1,"{""tier"": ""gold""}",ignored
C2,Globex,high,,G2,,
"""
    csv_file = tmp_path / "clients.csv"
    csv_file.write_text(csv_content)

    clients = load_clients(csv_file)
    assert [c.client_id for c in clients] == ["C1", "C2"]
    assert clients[0].requested_tasks == ("T1", "T2")
    assert clients[0].attributes.value == {"tier": "gold"}
    # non-numeric priority coerces to 0
    assert clients[1].priority_level == 0
    assert clients[1].attributes_json == ""


def test_load_workers_and_tasks_with_variant_headers(tmp_path):
    (tmp_path / "workers.csv").write_text('worker_id,name,skills,slots,max_load,team\nW1,Ana,"go,sql","[1,2]",2,core\n')
    (tmp_path / "tasks.csv").write_text('task_id,title,duration,required_skills,preferred_phases,concurrent\nT1,Build,2,go,1-2,1\n')

    workers = load_workers(tmp_path / "workers.csv")
    tasks = load_tasks(tmp_path / "tasks.csv")
    assert workers[0].skill_set == frozenset({"go", "sql"})
    assert workers[0].phases.value == (1, 2)
    assert workers[0].worker_group == "core"
    assert tasks[0].phases.value == (1, 2)
    assert tasks[0].max_concurrent == 1


def test_load_xlsx(tmp_path):
    path = tmp_path / "tasks.xlsx"
    pd.DataFrame([{"TaskID": "T1", "Duration": 3, "MaxConcurrent": 2}]).to_excel(path, index=False)
    tasks = load_tasks(path)
    assert tasks[0].task_id == "T1"
    assert tasks[0].duration == 3


def test_missing_id_column(tmp_path):
    csv_file = tmp_path / "clients.csv"
    csv_file.write_text("Foo,Bar\n1,2\n")
    with pytest.raises(FileContentError):
        load_clients(csv_file)


def test_unreadable_file(tmp_path):
    with pytest.raises(FileReadingError):
        load_clients(tmp_path / "nope.csv")


def test_load_rules_list_and_export_document(tmp_path):
    rules = [{"id": "r1", "type": "coRun", "config": {"tasks": ["T1", "T2"]}}]
    (tmp_path / "rules.json").write_text(json.dumps(rules))
    (tmp_path / "config.json").write_text(json.dumps({"version": "1.0", "configuration": {"rules": rules}}))

    assert load_rules(tmp_path / "rules.json")[0].corun_tasks == ("T1", "T2")
    assert load_rules(tmp_path / "config.json")[0].id == "r1"


@pytest.mark.parametrize("content", ['{"rules": 3}', "[1, 2]", "{bad"])
def test_load_rules_rejects_malformed(tmp_path, content):
    path = tmp_path / "rules.json"
    path.write_text(content)
    with pytest.raises((FileContentError, FileReadingError)):
        load_rules(path)


def test_export_bundle(tmp_path, clean_rows):
    clients, workers, tasks = clean_rows
    rules = [
        {"id": "r1", "type": "coRun", "config": {"tasks": ["T1"]}},
        {"id": "r2", "type": "coRun", "config": {"tasks": ["T1"]}, "active": False},
    ]
    snapshot = AnalysisSnapshot.build(clients, workers, tasks, rules)
    findings = analyze(clients, workers, tasks, rules)
    assert findings == []

    paths = export_bundle(tmp_path / "out", snapshot, findings, {"fairness": 5})
    assert sorted(p.name for p in paths.values()) == [
        "clients_clean.csv",
        "rules_config.json",
        "tasks_clean.csv",
        "workers_clean.csv",
    ]

    exported = load_clients(paths["clients"])
    assert exported == list(snapshot.clients)

    document = json.loads(paths["rules"].read_text())
    assert document["version"] == "1.0"
    assert document["configuration"]["priorities"] == {"fairness": 5}
    assert [r["id"] for r in document["configuration"]["rules"]] == ["r1"]
    assert document["metadata"]["totalRules"] == 2
    assert document["metadata"]["validationStatus"] == "clean"


def test_export_blocked_by_errors(tmp_path):
    clients = [{"ClientID": "C1", "PriorityLevel": 9}]
    snapshot = AnalysisSnapshot.build(clients=clients)
    with pytest.raises(ExportBlockedError) as exc_info:
        export_bundle(tmp_path, snapshot, analyze(clients))
    assert exc_info.value.error_count == 1
    assert not (tmp_path / "rules_config.json").exists()


def test_rules_config_reports_errors():
    clients = [{"ClientID": "C1", "PriorityLevel": 9}]
    document = build_rules_config(AnalysisSnapshot.build(clients=clients), analyze(clients))
    assert document["metadata"]["validationStatus"] == "errors_present"
    assert document["configuration"]["priorities"]["fairness"] == 3
