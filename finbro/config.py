# finbro/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "data_dir": "./data",
    "export_dir": "./data/exports",
    "currency": "$",
    "max_tags": 3,
    "top_categories": 3,
    "log_level": "WARNING",
    "output_modules": {
        "csv": "finbro.outputs.csv_output.CSVOutput",
        "txt": "finbro.outputs.text_output.TextOutput",
    },
}

ENV_OVERRIDES = {
    "FINBRO_DATA_DIR": "data_dir",
    "FINBRO_LOG_LEVEL": "log_level",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    """Load the YAML config at ``path`` over the defaults.

    A missing file is not an error. ``FINBRO_*`` environment variables
    win over both the file and the defaults.
    """
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
    config = _merge_defaults(data, DEFAULT_CONFIG)
    for env_name, key in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.environ[env_name]
    return config
