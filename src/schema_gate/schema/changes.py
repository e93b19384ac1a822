"""Output data model: detected changes and the errors that block publishing."""

from dataclasses import dataclass
from enum import Enum


class Criticality(Enum):
    """Severity of a detected schema change."""

    BREAKING = "Breaking"
    DANGEROUS = "Dangerous"  # Risky but not certainly breaking
    SAFE = "Safe"


@dataclass(frozen=True)
class SchemaChange:
    """One semantic difference between two built schemas."""

    criticality: Criticality
    message: str
    path: list[str] | None = None  # Schema coordinate, e.g. ["Query", "user"]

    @property
    def is_breaking(self) -> bool:
        return self.criticality == Criticality.BREAKING

    @property
    def coordinate(self) -> str | None:
        """Dotted form of the path, e.g. "Query.user"."""
        return ".".join(self.path) if self.path else None


@dataclass(frozen=True)
class SchemaError:
    """One reason a schema revision cannot be published."""

    message: str
    path: list[str] | None = None
