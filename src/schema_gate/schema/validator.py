"""Schema validator for schema-gate.

Decides whether a proposed schema revision for a target may be published.
The decision runs in a fixed order, and every step can end the run:

  Step                       -> Outcome
  -----------------------------------------------
  base schema injection      -> shared fragment merged into the first subschema
  identity check             -> unchanged content is valid, nothing else runs
  composability check        -> orchestrator errors, never waivable
  initial schema             -> nothing to diff against, composition decides
  before/after build + diff  -> classified changes, failures become one error
  breaking-change policy     -> breaking changes become errors unless accepted

Expected failures never raise. They end up in ValidationResult.errors.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

import logfire
from loguru import logger

from schema_gate.orchestrator.base import Orchestrator
from schema_gate.schema.changes import SchemaChange, SchemaError
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.inspector import Inspector
from schema_gate.schema.objects import Project, SchemaObject, TargetSelector


BREAKING_CHANGE_PREFIX = "Breaking Change: "
COMPARE_FAILURE_PREFIX = "Failed to compare schemas: "


# --- Result Data Model ---


@dataclass
class ValidationResult:
    """Verdict for one proposed schema revision."""

    valid: bool  # True if there are no errors
    is_composable: bool  # Currently always equal to valid
    errors: list[SchemaError] = field(default_factory=list)
    changes: list[SchemaChange] = field(default_factory=list)

    @classmethod
    def from_errors(
        cls,
        errors: list[SchemaError],
        changes: list[SchemaChange] | None = None,
    ) -> "ValidationResult":
        valid = not errors
        return cls(valid=valid, is_composable=valid, errors=errors, changes=changes or [])


# --- Validator ---


class SchemaValidator:
    """Runs the publish checks for a schema revision.

    The inspector and helper are injected once; the orchestrator is chosen per
    call because it depends on the project's composition type.
    """

    def __init__(self, inspector: Inspector, helper: SchemaHelper):
        self.inspector = inspector
        self.helper = helper
        self.logger = logger.bind(service="SchemaValidator")

    @logfire.instrument("SchemaValidator.validate", extract_args=False)
    async def validate(
        self,
        *,
        orchestrator: Orchestrator,
        selector: TargetSelector,
        incoming: SchemaObject,
        existing: SchemaObject | None,
        is_initial: bool,
        before: Sequence[SchemaObject],
        after: Sequence[SchemaObject],
        base_schema: str | None,
        accept_breaking_changes: bool,
        project: Project,
    ) -> ValidationResult:
        """Validate a proposed schema revision.

        Args:
            orchestrator: Composition engine for the project's composition type.
            selector: Target the revision is published to.
            incoming: The subschema being published.
            existing: The currently published version of that subschema, if any.
            is_initial: True when the target has no schema yet.
            before: Subschemas of the target as currently published.
            after: Subschemas of the target with the incoming one applied.
            base_schema: Shared SDL fragment merged into the first subschema.
            accept_breaking_changes: Keep breaking changes out of the errors.
            project: Composition policy of the owning project.

        Returns:
            A ValidationResult; `valid` is True only when `errors` is empty.

        Raises:
            SchemaParseError: If `base_schema` is not valid SDL.
        """
        self.logger.debug(f"Validating schema {incoming.source} for target {selector}")

        # --- Base schema injection ---
        # Trigger: a shared base fragment is configured for the target
        # Outcome: only after[0] carries the fragment, others pass through.
        # The fragment is used for the composability check only; the diff
        # builds below see the subschemas as published.
        after_with_base = self._with_base(after, base_schema)

        # --- Identity short-circuit ---
        if existing is not None and self.helper.hash(existing) == self.helper.hash(incoming):
            self.logger.debug("Incoming schema is identical to the existing one")
            return ValidationResult(valid=True, is_composable=True)

        # --- Composability ---
        external_composition = project.external_composition
        errors = list(
            await orchestrator.validate(
                after_with_base,
                external_composition if external_composition.enabled else None,
            )
        )

        if is_initial:
            return ValidationResult.from_errors(errors)

        # --- Diff against the published schema ---
        changes: list[SchemaChange] = []
        try:
            changes = await self._diff(orchestrator, selector, before, after, project)
        except Exception as e:
            self.logger.warning(f"Failed to compare schemas for target {selector}: {e}")
            errors.append(SchemaError(message=f"{COMPARE_FAILURE_PREFIX}{e}"))

        # --- Breaking-change policy ---
        breaking_changes = [change for change in changes if change.is_breaking]
        if breaking_changes:
            if accept_breaking_changes:
                self.logger.debug(
                    f"Schema contains {len(breaking_changes)} breaking changes, "
                    "accepted for this publish"
                )
            else:
                errors.extend(
                    SchemaError(
                        message=f"{BREAKING_CHANGE_PREFIX}{change.message}",
                        path=change.path,
                    )
                    for change in breaking_changes
                )

        return ValidationResult.from_errors(errors, changes)

    def _with_base(
        self,
        schemas: Sequence[SchemaObject],
        base_schema: str | None,
    ) -> list[SchemaObject]:
        """Merge the base fragment into the first schema of the sequence."""
        merged = list(schemas)
        if base_schema and merged:
            merged[0] = self.helper.with_base_schema(merged[0], base_schema)
        return merged

    async def _diff(
        self,
        orchestrator: Orchestrator,
        selector: TargetSelector,
        before: Sequence[SchemaObject],
        after: Sequence[SchemaObject],
        project: Project,
    ) -> list[SchemaChange]:
        """Build both sides concurrently and diff them.

        Returns an empty list when there is no published schema to compare to.
        Any build or diff failure is raised to the caller.
        """
        results = await asyncio.gather(
            orchestrator.build(before, project.external_composition),
            orchestrator.build(after, project.external_composition),
            return_exceptions=True,
        )
        # Both builds are awaited before the first failure is raised
        for result in results:
            if isinstance(result, BaseException):
                raise result
        existing_schema, incoming_schema = results

        if existing_schema is None:
            self.logger.debug("No previous composed schema, skipping diff")
            return []

        return await self.inspector.diff(
            self.helper.build_schema(existing_schema),
            self.helper.build_schema(incoming_schema),
            selector,
        )
