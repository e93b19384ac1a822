"""Schemas for the external composition service protocol."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class CompositionRequestItem(BaseModel):
    """One subschema sent to the composition service."""

    raw: str = Field(..., description="Raw SDL of the subschema")
    source: str = Field(..., description="Service name or file the SDL came from")
    url: str | None = Field(None, description="URL of the service, if known")


class CompositionErrorItem(BaseModel):
    """One error reported by the composition service."""

    message: str = Field(..., description="Human readable composition error")


class CompositionSuccessResult(BaseModel):
    sdl: str = Field(..., description="Composed public SDL")
    supergraph: str | None = Field(None, description="Supergraph SDL, if the service produces one")


class CompositionFailureResult(BaseModel):
    errors: list[CompositionErrorItem] = Field(default_factory=list)


class CompositionSucceeded(BaseModel):
    """Response body when the schema set composed."""

    type: Literal["success"]
    result: CompositionSuccessResult


class CompositionFailed(BaseModel):
    """Response body when the schema set did not compose."""

    type: Literal["failure"]
    result: CompositionFailureResult


CompositionResponse = Annotated[
    Union[CompositionSucceeded, CompositionFailed], Field(discriminator="type")
]

composition_response_adapter: TypeAdapter[CompositionSucceeded | CompositionFailed] = TypeAdapter(
    CompositionResponse
)
