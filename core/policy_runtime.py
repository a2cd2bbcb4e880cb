"""Configuration and runtime policy bootstrapping."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

# Environment variable -> dotted config key.
ENV_OVERRIDES: dict[str, str] = {
    "CM_DATA_DIR": "paths.data_dir",
    "CM_RULES_DB": "paths.rules_db_path",
    "CM_AUDIT_LOG": "paths.audit_log_path",
    "CM_LOG_LEVEL": "logging.level",
    "DEFAULT_TRUST": "soul.default_trust",
    "TRUST_THRESHOLD": "soul.trust_threshold",
}

# Overrides parsed as YAML scalars; the rest are kept as plain strings.
TYPED_OVERRIDES = frozenset({"DEFAULT_TRUST", "TRUST_THRESHOLD"})

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(config: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay known environment variables onto the config."""
    merged = dict(config)
    for env_name, dotted in ENV_OVERRIDES.items():
        if env_name not in environ:
            continue
        override: dict[str, Any] = {}
        node = override
        *parents, leaf = dotted.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        raw = environ[env_name]
        node[leaf] = yaml.safe_load(raw) if env_name in TYPED_OVERRIDES else raw
        merged = merge_dicts(merged, override)
    return merged


def load_effective_config(root: Path, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load default.yaml, overlay local.yaml, then environment variables."""
    config_dir = root / "config"
    merged = merge_dicts(load_yaml(config_dir / "default.yaml"), load_yaml(config_dir / "local.yaml"))
    return apply_env_overrides(merged, os.environ if environ is None else environ)


def ensure_runtime_dirs(root: Path, config: dict[str, Any]) -> dict[str, Path]:
    """Ensure data and log directories exist and return resolved paths."""
    paths_cfg = config.get("paths", {})
    data_dir = (root / paths_cfg.get("data_dir", "data/memory")).resolve()
    rules_db_path = (root / paths_cfg.get("rules_db_path", "data/rules.db")).resolve()
    audit_log_path = (root / paths_cfg.get("audit_log_path", "logs/audit.jsonl")).resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    rules_db_path.parent.mkdir(parents=True, exist_ok=True)
    audit_log_path.parent.mkdir(parents=True, exist_ok=True)

    return {
        "data_dir": data_dir,
        "rules_db_path": rules_db_path,
        "audit_log_path": audit_log_path,
    }


def configure_logging(level: str | int = "INFO") -> None:
    """Install a root handler once and set the ``cm`` logger level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level in config: {level}")
        level = resolved
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger("cm").setLevel(level)
