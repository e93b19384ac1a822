"""Schema validation core for schema-gate.

Decides whether a schema revision may be published: does the subschema set
compose, and does it break clients of the target?
"""

from schema_gate.schema.objects import (
    ExternalComposition,
    Project,
    SchemaObject,
    TargetSelector,
)
from schema_gate.schema.changes import (
    Criticality,
    SchemaChange,
    SchemaError,
)
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.inspector import Inspector, UsageChecker, change_path
from schema_gate.schema.validator import (
    SchemaValidator,
    ValidationResult,
)

__all__ = [
    # Objects
    "ExternalComposition",
    "Project",
    "SchemaObject",
    "TargetSelector",
    # Changes
    "Criticality",
    "SchemaChange",
    "SchemaError",
    # Helper
    "SchemaHelper",
    # Inspector
    "Inspector",
    "UsageChecker",
    "change_path",
    # Validator
    "SchemaValidator",
    "ValidationResult",
]
