# transaction_dashboard/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_SEED_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"

DEFAULT_CONFIG: Dict[str, object] = {
    "db_path": "transactions.db",
    "seed_url": DEFAULT_SEED_URL,
    "request_timeout": 30.0,
    "server": {
        "host": "127.0.0.1",
        "port": 5000,
    },
    "cors_origins": [],
    "dashboard": {
        "api_url": "http://localhost:5000",
        "month": "March",
    },
    "log_level": "INFO",
}

# environment variable -> (config path, cast)
_ENV_OVERRIDES = {
    "TXDASH_DB_PATH": (("db_path",), str),
    "TXDASH_SEED_URL": (("seed_url",), str),
    "TXDASH_REQUEST_TIMEOUT": (("request_timeout",), float),
    "TXDASH_HOST": (("server", "host"), str),
    "TXDASH_PORT": (("server", "port"), int),
    "TXDASH_CORS_ORIGINS": (
        ("cors_origins",),
        lambda raw: [origin.strip() for origin in raw.split(",") if origin.strip()],
    ),
    "TXDASH_API_URL": (("dashboard", "api_url"), str),
    "TXDASH_MONTH": (("dashboard", "month"), str),
    "TXDASH_LOG_LEVEL": (("log_level",), str),
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


def _apply_env(config: Dict[str, object]) -> Dict[str, object]:
    for name, (path, cast) in _ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            value = cast(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
        target = config
        for key in path[:-1]:
            target = target.setdefault(key, {})  # type: ignore[assignment]
        target[path[-1]] = value
    return config


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    """
    Load the YAML config at *path* (if it exists), fill in defaults and apply
    TXDASH_* environment overrides.
    """
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
    return _apply_env(_merge_defaults(data, DEFAULT_CONFIG))
