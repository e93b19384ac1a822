"""CLI commands for schema-gate."""

from . import check

__all__ = ["check"]
