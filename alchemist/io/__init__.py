"""I/O utilities for CSV/XLSX import and export."""

from .export_csv import build_rules_config, export_bundle
from .import_csv import load_clients, load_rules, load_tasks, load_workers, map_columns

__all__ = [
    "load_clients",
    "load_workers",
    "load_tasks",
    "load_rules",
    "map_columns",
    "build_rules_config",
    "export_bundle",
]
