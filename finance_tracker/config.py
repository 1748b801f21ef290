from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

from finance_tracker.core.categories import EXPENSE_CATEGORIES, INCOME_CATEGORIES
from finance_tracker.store import STORAGE_KEY

DEFAULT_CONFIG: Dict[str, object] = {
    "data_dir": "./data",
    "storage_key": STORAGE_KEY,
    "output_dir": "./exports",
    "output_modules": {
        "csv": "finance_tracker.outputs.csv_output.CSVOutput",
        "html": "finance_tracker.outputs.html_output.HTMLOutput",
        "excel": "finance_tracker.outputs.excel_output.ExcelOutput",
    },
    "categories": {
        "income": INCOME_CATEGORIES,
        "expense": EXPENSE_CATEGORIES,
    },
    "chart": {
        "width": 800,
        "height": 300,
        "device_pixel_ratio": 1.0,
    },
    "notification_seconds": 3,
    "log_level": "WARNING",
}

ENV_DATA_DIR = "FINANCE_TRACKER_DATA_DIR"
ENV_LOG_LEVEL = "FINANCE_TRACKER_LOG_LEVEL"


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def _apply_env(config: Dict[str, object]) -> Dict[str, object]:
    if os.environ.get(ENV_DATA_DIR):
        config["data_dir"] = os.environ[ENV_DATA_DIR]
    if os.environ.get(ENV_LOG_LEVEL):
        config["log_level"] = os.environ[ENV_LOG_LEVEL]
    return config


def load_config(path: str | os.PathLike | None = None) -> Dict[str, object]:
    """Read ``path`` (YAML) over the defaults; a missing file means defaults."""
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with open(path, "r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
    return _apply_env(_merge_defaults(data, DEFAULT_CONFIG))

