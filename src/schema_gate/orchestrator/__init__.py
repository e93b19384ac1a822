"""Composition backends for schema-gate."""

from schema_gate.orchestrator.base import Orchestrator
from schema_gate.orchestrator.external import ExternalOrchestrator
from schema_gate.orchestrator.single import SingleOrchestrator

__all__ = [
    "Orchestrator",
    "ExternalOrchestrator",
    "SingleOrchestrator",
]
