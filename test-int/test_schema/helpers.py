"""Shared helpers and constants for schema integration tests.

Separated from conftest.py so they can be explicitly imported by test modules.
Conftest fixtures are auto-injected by pytest and don't need explicit import.
"""

from pathlib import Path

from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.objects import SchemaObject


# --- Fixture Paths ---

FIXTURES_ROOT = Path(__file__).parent.parent / "fixtures" / "graphql"
BASE_SCHEMA_FILE = FIXTURES_ROOT / "base.graphql"
INITIAL_DIR = FIXTURES_ROOT / "initial"
V1_DIR = FIXTURES_ROOT / "v1"
V2_SAFE_DIR = FIXTURES_ROOT / "v2-safe"
V2_BREAKING_DIR = FIXTURES_ROOT / "v2-breaking"
V2_DANGEROUS_DIR = FIXTURES_ROOT / "v2-dangerous"
V2_BROKEN_DIR = FIXTURES_ROOT / "v2-broken"


# --- Schema Loading ---


def load_schema(helper: SchemaHelper, directory: Path, name: str) -> SchemaObject:
    """Load `<directory>/<name>.graphql` as a SchemaObject named after the file."""
    filepath = directory / f"{name}.graphql"
    return helper.create_schema_object(filepath.read_text(encoding="utf-8"), source=name)


def load_base_schema() -> str:
    return BASE_SCHEMA_FILE.read_text(encoding="utf-8")
