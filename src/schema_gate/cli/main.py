"""Main CLI entry point for schema-gate."""  # pragma: no cover

from schema_gate.cli.app import app  # pragma: no cover

# Register commands
from schema_gate.cli.commands import check  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
