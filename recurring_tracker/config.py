# recurring_tracker/config.py
from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "store": "sqlite",
    "store_modules": {
        "sqlite": "recurring_tracker.stores.sqlite.SQLiteStore",
        "memory": "recurring_tracker.stores.memory.MemoryStore",
    },
    "output_modules": {
        "csv": "recurring_tracker.outputs.csv_output.CSVOutput",
        "console": "recurring_tracker.outputs.console_output.ConsoleOutput",
    },
    "db_path": "recurbook.db",
    "output_dir": "./data",
    "templates_file": None,
    "preview_months": 12,
    "upcoming_days": 7,
    "locale": "en",
    "enforce_max_occurrences": False,
    "log_level": "INFO",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    if path is None or not Path(path).exists():
        return _merge_defaults({}, DEFAULT_CONFIG)
    with Path(path).open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")
    return _merge_defaults(data, DEFAULT_CONFIG)
