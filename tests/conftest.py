"""Shared fixtures for schema-gate unit tests."""

import os

import pytest

import schema_gate.config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at a temp dir and drop SCHEMA_GATE_* variables from the environment."""
    for key in list(os.environ):
        if key.startswith("SCHEMA_GATE_"):
            monkeypatch.delenv(key)
    config_dir = tmp_path / ".schema-gate"
    monkeypatch.setenv("SCHEMA_GATE_CONFIG_DIR", str(config_dir))
    schema_gate.config._CONFIG_CACHE = None

    yield config_dir

    schema_gate.config._CONFIG_CACHE = None
