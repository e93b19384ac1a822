"""Schemas for validation reports returned by the CLI."""

from pydantic import BaseModel, Field

from schema_gate.schema.validator import ValidationResult


class SchemaErrorReport(BaseModel):
    message: str = Field(..., description="Why the revision cannot be published")
    path: list[str] | None = Field(None, description="Schema coordinate the error refers to")


class SchemaChangeReport(BaseModel):
    criticality: str = Field(..., description="Breaking, Dangerous or Safe")
    message: str = Field(..., description="Human readable description of the change")
    path: list[str] | None = Field(None, description="Schema coordinate of the change")


class ValidationReport(BaseModel):
    """Serializable form of a ValidationResult."""

    valid: bool = Field(..., description="True if the revision can be published")
    is_composable: bool = Field(..., description="True if the subschema set composes")
    errors: list[SchemaErrorReport] = Field(default_factory=list)
    changes: list[SchemaChangeReport] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationReport":
        return cls(
            valid=result.valid,
            is_composable=result.is_composable,
            errors=[SchemaErrorReport(message=e.message, path=e.path) for e in result.errors],
            changes=[
                SchemaChangeReport(
                    criticality=c.criticality.value,
                    message=c.message,
                    path=c.path,
                )
                for c in result.changes
            ],
        )
