"""Typed errors for schema parsing, building and external composition."""


class SchemaGateError(Exception):
    """Base exception for all schema-gate errors."""

    pass


class SchemaParseError(SchemaGateError):
    """Raised when raw SDL cannot be parsed."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        location = f" in {source}" if source else ""
        super().__init__(f"{message}{location}")


class SchemaBuildError(SchemaGateError):
    """Raised when a composed schema cannot be built into an executable schema."""

    pass


class ExternalCompositionError(SchemaGateError):
    """Raised when the external composition service cannot be reached or answers garbage."""

    pass
