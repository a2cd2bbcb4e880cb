"""Configuration loading tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from core.policy_runtime import (
    apply_env_overrides,
    configure_logging,
    ensure_runtime_dirs,
    load_effective_config,
    load_yaml,
    merge_dicts,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_merge_dicts_is_recursive() -> None:
    base = {"paths": {"data_dir": "a", "audit_log_path": "b"}, "rules": {"persist": False}}
    merged = merge_dicts(base, {"paths": {"data_dir": "c"}})
    assert merged == {"paths": {"data_dir": "c", "audit_log_path": "b"}, "rules": {"persist": False}}
    assert base["paths"]["data_dir"] == "a"


def test_load_yaml_missing_and_invalid(tmp_path: Path) -> None:
    assert load_yaml(tmp_path / "missing.yaml") == {}
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(bad)


def test_env_overrides_parse_scalars() -> None:
    config = apply_env_overrides(
        {"paths": {"data_dir": "data/memory"}},
        {"CM_DATA_DIR": "/srv/memory", "TRUST_THRESHOLD": "0.9", "UNRELATED": "x"},
    )
    assert config["paths"]["data_dir"] == "/srv/memory"
    assert config["soul"]["trust_threshold"] == 0.9


def test_env_overrides_keep_paths_and_levels_as_strings() -> None:
    config = apply_env_overrides(
        {},
        {"CM_LOG_LEVEL": "off", "CM_DATA_DIR": "null", "CM_RULES_DB": "2024"},
    )
    assert config["logging"]["level"] == "off"
    assert config["paths"]["data_dir"] == "null"
    assert config["paths"]["rules_db_path"] == "2024"


def test_effective_config_layers(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text(
        "limits:\n  max_weight: 100.0\nlogging:\n  level: INFO\n", encoding="utf-8"
    )
    (config_dir / "local.yaml").write_text("limits:\n  max_weight: 10.0\n", encoding="utf-8")

    config = load_effective_config(tmp_path, environ={"CM_LOG_LEVEL": "DEBUG"})
    assert config["limits"]["max_weight"] == 10.0
    assert config["logging"]["level"] == "DEBUG"


def test_shipped_default_config_loads() -> None:
    config = load_effective_config(REPO_ROOT, environ={})
    assert config["paths"]["data_dir"] == "data/memory"
    assert config["limits"]["max_weight"] == 100.0
    assert config["rules"]["persist"] is False


def test_ensure_runtime_dirs(tmp_path: Path) -> None:
    paths = ensure_runtime_dirs(tmp_path, {"paths": {"data_dir": "store/mem"}})
    assert paths["data_dir"] == (tmp_path / "store" / "mem").resolve()
    assert paths["data_dir"].is_dir()
    assert paths["audit_log_path"].parent.is_dir()


def test_configure_logging_sets_level() -> None:
    configure_logging("debug")
    assert logging.getLogger("cm").level == logging.DEBUG
    configure_logging("INFO")
    with pytest.raises(ValueError):
        configure_logging("chatty")
