"""Orchestrator protocol for pluggable composition backends."""

from typing import Protocol, Sequence

from schema_gate.schema.changes import SchemaError
from schema_gate.schema.objects import ExternalComposition, SchemaObject


class Orchestrator(Protocol):
    """Contract for schema composition engines."""

    async def validate(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None,
    ) -> list[SchemaError]:
        """Return composition errors for the schema set, empty when it composes."""
        ...

    async def build(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None,
    ) -> SchemaObject | None:
        """Compose the schema set into one schema, or None when there is nothing to compose."""
        ...
