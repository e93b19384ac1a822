"""Schema helper: parsing, hashing and building of subschemas.

All GraphQL semantics are delegated to graphql-core. The helper only adapts
its API to SchemaObject values:

  parse              -> raw SDL to DocumentNode
  hash               -> content fingerprint of a SchemaObject
  with_base_schema   -> prepend a shared fragment to one subschema
  build_schema       -> composed SchemaObject to an executable GraphQLSchema
"""

import hashlib
from dataclasses import replace

from graphql import DocumentNode, GraphQLError, GraphQLSchema, build_ast_schema, concat_ast, parse
from loguru import logger

from schema_gate.errors import SchemaBuildError, SchemaParseError
from schema_gate.schema.objects import SchemaObject


class SchemaHelper:
    """Parses, fingerprints and builds schemas for the validator."""

    def parse(self, raw: str, source: str | None = None) -> DocumentNode:
        """Parse raw SDL into a document.

        Raises:
            SchemaParseError: If the SDL has a syntax error.
        """
        try:
            return parse(raw)
        except GraphQLError as e:
            raise SchemaParseError(e.message, source=source) from e

    def create_schema_object(self, raw: str, source: str, url: str | None = None) -> SchemaObject:
        """Parse raw SDL and wrap it as a SchemaObject."""
        return SchemaObject(raw=raw, document=self.parse(raw, source), source=source, url=url)

    def hash(self, schema: SchemaObject) -> str:
        """Compute the SHA-256 fingerprint of a schema's raw text.

        Only the raw text contributes, so two schemas that differ in formatting
        alone get different hashes.
        """
        return hashlib.sha256(schema.raw.encode("utf-8")).hexdigest()

    def with_base_schema(self, schema: SchemaObject, base_schema: str) -> SchemaObject:
        """Return a copy of `schema` with the base fragment prepended.

        Raises:
            SchemaParseError: If the base fragment does not parse.
        """
        base_document = self.parse(base_schema, source="base schema")
        return replace(
            schema,
            raw=base_schema + schema.raw,
            document=concat_ast([base_document, schema.document]),
        )

    def build_schema(self, schema: SchemaObject | None) -> GraphQLSchema:
        """Build an executable schema from a composed SchemaObject.

        Raises:
            SchemaBuildError: If there is no schema or its SDL is not a valid type system.
        """
        if schema is None:
            raise SchemaBuildError("No composed schema to build")

        try:
            return build_ast_schema(schema.document)
        except (TypeError, GraphQLError) as e:
            # graphql-core reports invalid SDL as TypeError
            logger.debug(f"Could not build schema from {schema.source}: {e}")
            raise SchemaBuildError(str(e)) from e
