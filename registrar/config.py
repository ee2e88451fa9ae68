"""
Configuration defaults and loading for the registrar platform.

A JSON file passed with ``--config`` is merged over ``DEFAULT_CONFIG``;
nested sections are merged key by key. Two environment variables win over
both: ``REGISTRAR_DATABASE_PATH`` and ``REGISTRAR_LOG_LEVEL``.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from .core.exceptions import ConfigurationError
from .core.grading import DEFAULT_GRADE_SCALE, GRADE_LABELS, GradeScale


DEFAULT_CONFIG: Dict[str, Any] = {
    "database_type": "sqlite",
    "database_config": {"database_path": "registrar.db"},
    "grade_scale": [
        {"min": band.min_percentage, "grade": band.grade.value} for band in DEFAULT_GRADE_SCALE
    ],
    "prerequisites": {"prevent_cycles": False},
    "rest": {"host": "0.0.0.0", "port": 8000},
    "log_level": "INFO",
}

ENV_DATABASE_PATH = "REGISTRAR_DATABASE_PATH"
ENV_LOG_LEVEL = "REGISTRAR_LOG_LEVEL"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> None:
    level = str(config.get("log_level", "")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"Unknown log level: {config.get('log_level')!r}")
    if not isinstance(config.get("prerequisites", {}).get("prevent_cycles"), bool):
        raise ConfigurationError("prerequisites.prevent_cycles must be true or false")
    port = config.get("rest", {}).get("port")
    if not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigurationError(f"Invalid REST port: {port!r}")
    # Raises ConfigurationError for a malformed scale
    GradeScale.from_config(config.get("grade_scale") or [])


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Load configuration from defaults, an optional JSON file and the environment."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read config file {path}: {e}")
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")
        config = _merge(config, file_config)

    environ = os.environ if environ is None else environ
    if environ.get(ENV_DATABASE_PATH):
        config["database_config"]["database_path"] = environ[ENV_DATABASE_PATH]
    if environ.get(ENV_LOG_LEVEL):
        config["log_level"] = environ[ENV_LOG_LEVEL]

    validate_config(config)
    return config


def describe_scale(scale: GradeScale) -> str:
    """One-line summary of a grade scale for startup logging."""
    return ", ".join(f"{GRADE_LABELS[b.grade]}>={b.min_percentage:g}" for b in scale)
