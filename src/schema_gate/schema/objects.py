"""Input data model for schema validation.

Everything here is supplied by the caller and treated as read-only:

  Entity               -> Role
  -----------------------------------------------
  SchemaObject         -> one subschema: raw SDL plus its parsed document
  ExternalComposition  -> remote composition settings of a project
  Project              -> composition policy for the target
  TargetSelector       -> scope a diff is evaluated against
"""

from dataclasses import dataclass, field

from graphql import DocumentNode


@dataclass(frozen=True)
class SchemaObject:
    """A single subschema source and its parsed form.

    The content hash is a pure function of `raw`, see SchemaHelper.hash.
    """

    raw: str
    document: DocumentNode
    source: str  # Service name or file the SDL came from
    url: str | None = None


@dataclass(frozen=True)
class ExternalComposition:
    """Settings for composing through a remote composition service."""

    enabled: bool = False
    endpoint: str | None = None
    secret: str | None = None


@dataclass(frozen=True)
class Project:
    """Composition policy of the project that owns the target."""

    external_composition: ExternalComposition = field(default_factory=ExternalComposition)


@dataclass(frozen=True)
class TargetSelector:
    """Identifies the deployed target a schema change is evaluated against."""

    organization: str
    project: str
    target: str

    def __str__(self) -> str:
        return f"{self.organization}/{self.project}/{self.target}"
