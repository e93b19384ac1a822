"""Local orchestrator backed by graphql-core.

Subschemas are composed by concatenating their documents into one SDL
document. graphql-core checks the result in two passes:

  validate_sdl      -> document-level rules (duplicate types, unknown types, ...)
  validate_schema   -> type-system rules (root types, interface implementations, ...)
"""

from typing import Sequence

from graphql import (
    DocumentNode,
    GraphQLError,
    build_ast_schema,
    concat_ast,
    print_schema,
    validate_schema,
)
from graphql.validation.validate import validate_sdl
from loguru import logger

from schema_gate.errors import SchemaBuildError
from schema_gate.schema.changes import SchemaError
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.objects import ExternalComposition, SchemaObject


COMPOSED_SOURCE = "composed"


class SingleOrchestrator:
    """Composes subschemas in-process. External composition settings are ignored."""

    def __init__(self, helper: SchemaHelper | None = None):
        self.helper = helper or SchemaHelper()

    async def validate(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None = None,
    ) -> list[SchemaError]:
        if not schemas:
            return [SchemaError(message="No subschemas to compose")]

        document = _concat(schemas)

        sdl_errors = validate_sdl(document)
        if sdl_errors:
            return [_to_schema_error(error) for error in sdl_errors]

        try:
            schema = build_ast_schema(document, assume_valid_sdl=True)
        except TypeError as e:
            return [SchemaError(message=str(e))]

        return [_to_schema_error(error) for error in validate_schema(schema)]

    async def build(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None = None,
    ) -> SchemaObject | None:
        """Compose the subschemas into one printed schema.

        Raises:
            SchemaBuildError: If the concatenated SDL is not a valid type system.
        """
        if not schemas:
            return None

        try:
            schema = build_ast_schema(_concat(schemas))
        except (TypeError, GraphQLError) as e:
            raise SchemaBuildError(f"Could not compose {len(schemas)} subschemas: {e}") from e

        logger.debug(f"Composed {len(schemas)} subschemas locally")
        return self.helper.create_schema_object(print_schema(schema), source=COMPOSED_SOURCE)


def _concat(schemas: Sequence[SchemaObject]) -> DocumentNode:
    return concat_ast([schema.document for schema in schemas])


def _to_schema_error(error: GraphQLError) -> SchemaError:
    # SDL and type-system errors carry no coordinate, only AST nodes
    return SchemaError(message=error.message)
