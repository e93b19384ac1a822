"""Shared fixtures for schema integration tests.

Helper functions and path constants live in helpers.py for explicit import.
This file only contains pytest fixtures (auto-injected by pytest).
"""

import pytest

from schema_gate.config import SchemaGateConfig
from schema_gate.container import Container
from schema_gate.schema.objects import TargetSelector


@pytest.fixture
def container() -> Container:
    return Container.create(SchemaGateConfig())


@pytest.fixture
def helper(container):
    return container.helper


@pytest.fixture
def selector() -> TargetSelector:
    return TargetSelector(organization="acme", project="shop", target="production")
