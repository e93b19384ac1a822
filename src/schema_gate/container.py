"""Composition root for schema-gate.

This module owns:
- Reading ConfigManager + environment variables
- Choosing the orchestrator for the configured composition mode
- Wiring the validator with its inspector and helper
"""

from dataclasses import dataclass

from schema_gate.config import ConfigManager, SchemaGateConfig
from schema_gate.orchestrator import ExternalOrchestrator, Orchestrator, SingleOrchestrator
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.inspector import Inspector, UsageChecker
from schema_gate.schema.validator import SchemaValidator


@dataclass
class Container:
    """Holds the wired collaborators for one entrypoint."""

    config: SchemaGateConfig
    helper: SchemaHelper
    validator: SchemaValidator
    orchestrator: Orchestrator

    @classmethod
    def create(
        cls,
        config: SchemaGateConfig | None = None,
        usage_checker: UsageChecker | None = None,
    ) -> "Container":
        """Build the container.

        The external orchestrator only composes remotely when the project
        policy enables it, so it is safe to wire unconditionally.
        """
        config = config or ConfigManager().config
        helper = SchemaHelper()
        orchestrator = ExternalOrchestrator(
            fallback=SingleOrchestrator(helper),
            helper=helper,
            timeout=config.external_composition_timeout,
        )
        validator = SchemaValidator(inspector=Inspector(usage_checker), helper=helper)
        return cls(config=config, helper=helper, validator=validator, orchestrator=orchestrator)
