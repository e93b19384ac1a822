"""External composition orchestrator.

Projects can delegate composition to their own HTTP service. The request is a
JSON list of subschemas, signed with HMAC-SHA256 over the exact body bytes
using the project's secret:

  POST <endpoint>
  X-Hive-Signature-256: <hex digest>
  [{"raw": "...", "source": "...", "url": null}, ...]

When external composition is not enabled for a call, the orchestrator
delegates to a fallback (usually the local SingleOrchestrator).
"""

import hashlib
import hmac
import json
from collections.abc import Callable
from typing import Sequence

from httpx import AsyncClient, HTTPError, Timeout
from loguru import logger

from schema_gate.errors import ExternalCompositionError
from schema_gate.orchestrator.base import Orchestrator
from schema_gate.schema.changes import SchemaError
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.objects import ExternalComposition, SchemaObject
from schema_gate.schemas.composition import (
    CompositionFailed,
    CompositionRequestItem,
    CompositionSucceeded,
    composition_response_adapter,
)


SIGNATURE_HEADER = "X-Hive-Signature-256"
EXTERNAL_SOURCE = "external composition"


def sign_body(body: bytes, secret: str) -> str:
    """Compute the HMAC-SHA256 hex digest of a request body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class ExternalOrchestrator:
    """Composes subschemas through a project's external composition service."""

    def __init__(
        self,
        fallback: Orchestrator,
        helper: SchemaHelper | None = None,
        timeout: float = 30.0,
        client_factory: Callable[[], AsyncClient] | None = None,
    ):
        self.fallback = fallback
        self.helper = helper or SchemaHelper()
        self.timeout = timeout
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> AsyncClient:
        return AsyncClient(timeout=Timeout(self.timeout))

    async def validate(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None,
    ) -> list[SchemaError]:
        if external_composition is None or not external_composition.enabled:
            return await self.fallback.validate(schemas, external_composition)

        try:
            response = await self._compose(schemas, external_composition)
        except ExternalCompositionError as e:
            logger.warning(f"External composition failed during validation: {e}")
            return [SchemaError(message=f"External composition failure: {e}")]

        if isinstance(response, CompositionFailed):
            return [SchemaError(message=error.message) for error in response.result.errors]
        return []

    async def build(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition | None,
    ) -> SchemaObject | None:
        """Compose remotely and return the composed SDL.

        Returns None when there is nothing to compose or the service reports a
        composition failure.

        Raises:
            ExternalCompositionError: If the service cannot be reached or answers
                with something other than a composition result.
        """
        if external_composition is None or not external_composition.enabled:
            return await self.fallback.build(schemas, external_composition)

        if not schemas:
            return None

        response = await self._compose(schemas, external_composition)
        if isinstance(response, CompositionSucceeded):
            return self.helper.create_schema_object(response.result.sdl, source=EXTERNAL_SOURCE)

        logger.debug(
            f"External composition returned {len(response.result.errors)} errors, no schema built"
        )
        return None

    async def _compose(
        self,
        schemas: Sequence[SchemaObject],
        external_composition: ExternalComposition,
    ) -> CompositionSucceeded | CompositionFailed:
        if not external_composition.endpoint or not external_composition.secret:
            raise ExternalCompositionError(
                "External composition is enabled but endpoint or secret is missing"
            )

        items = [
            CompositionRequestItem(raw=schema.raw, source=schema.source, url=schema.url).model_dump()
            for schema in schemas
        ]
        body = json.dumps(items).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: sign_body(body, external_composition.secret),
        }

        logger.debug(f"Composing {len(schemas)} subschemas at {external_composition.endpoint}")
        try:
            async with self._client_factory() as client:
                response = await client.post(
                    external_composition.endpoint, content=body, headers=headers
                )
                response.raise_for_status()
                return composition_response_adapter.validate_python(response.json())
        except HTTPError as e:
            raise ExternalCompositionError(f"Request to composition service failed: {e}") from e
        except ValueError as e:
            # Invalid JSON or a body that is not a composition result
            raise ExternalCompositionError(f"Unexpected composition service response: {e}") from e
