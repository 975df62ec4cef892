"""Base class for resource managers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import pydantic
import structlog

from sendgrid_admin.errors import DecodeError, ValidationError, body_snippet

if TYPE_CHECKING:
    from sendgrid_admin._http import Transport

logger = structlog.get_logger()

ModelT = TypeVar("ModelT")


class BaseManager:
    """Base class for SendGrid resource managers.

    Each manager wraps transport calls for one entity type and decides on
    its own which status codes count as success.
    """

    resource: str = "resource"

    def __init__(self, transport: Transport) -> None:
        """Initialize manager.

        Args:
            transport: Transport used for every request
        """
        self._transport = transport
        self._log = logger.bind(manager=self.resource)

    @staticmethod
    def _require(value: str, field: str) -> None:
        if not value:
            raise ValidationError(
                message=f"{field} is required",
                details={"field": field},
            )

    def _decode(self, model: Any, body: str, *, what: str) -> Any:
        """Decode a body with a model class or a TypeAdapter."""
        try:
            if isinstance(model, pydantic.TypeAdapter):
                return model.validate_json(body)
            return model.model_validate_json(body)
        except pydantic.ValidationError as exc:
            raise DecodeError(
                message=f"failed parsing {what}: {exc.error_count()} error(s)",
                body=body,
                details={"raw_response_snippet": body_snippet(body)},
            ) from exc

    def _decode_with_id(self, model: type[ModelT], body: str, *, what: str) -> ModelT:
        """Decode a single entity, rejecting one without a server-assigned id."""
        entity = self._decode(model, body, what=what)
        if not entity.id:
            raise DecodeError(
                message=f"response is missing ID. {body_snippet(body)}",
                body=body,
            )
        return entity
