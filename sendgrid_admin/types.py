"""Type definitions for the SendGrid SDK.

Pydantic models for request/response serialization. Every field has an
empty default: the API omits fields freely, and request bodies leave out
empty values instead of sending null.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TEMPLATE_NAME_MAX_LENGTH = 100

# Scopes SendGrid appends to keys on its own; never requested by callers.
IMPLICIT_SCOPES = frozenset(
    {"2fa_required", "sender_verification_eligible", "sender_verification_legacy"}
)


class TemplateGeneration(str, Enum):
    """Template engine generation. Fixed once the template exists."""

    DYNAMIC = "dynamic"
    LEGACY = "legacy"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # null decodes to the field's empty default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("warnings", mode="before", check_fields=False)
    @classmethod
    def warning_messages(cls, value: Any) -> Any:
        # The API sends [{"message": "..."}]; keep only the text
        if isinstance(value, list):
            return [item.get("message", "") if isinstance(item, dict) else item for item in value]
        return value

    def to_wire(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        """Dump with wire names, omitting empty values."""
        data = self.model_dump(mode="json", by_alias=True, exclude=exclude)
        return {k: v for k, v in data.items() if v}


class APIKey(_WireModel):
    """SendGrid API key.

    ``api_key`` holds the secret and is only populated on the create
    response; reads never return it.
    """

    id: str = Field(default="", alias="api_key_id")
    api_key: str = ""
    name: str = ""
    scopes: list[str] = Field(default_factory=list)


class TemplateVersion(_WireModel):
    """Version of a transactional template."""

    id: str = ""
    template_id: str = ""
    updated_at: str = ""  # Read-only
    thumbnail_url: str = ""  # Read-only
    warnings: list[str] = Field(default_factory=list)  # Read-only
    active: int = 0  # 1 = active, 0 = inactive
    name: str = ""
    html_content: str = ""
    plain_content: str = ""
    generate_plain_content: bool = False
    subject: str = ""
    editor: str = ""  # "code" | "design"
    test_data: str = ""


class Template(_WireModel):
    """Transactional template."""

    id: str = ""
    name: str = ""
    generation: str = ""
    updated_at: str = ""
    versions: list[TemplateVersion] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class TemplateList(_WireModel):
    """Template listing envelope: ``{"result": [...]}``.

    Only the listing endpoint wraps its collection; single reads return a
    bare template object.
    """

    result: list[Template] = Field(default_factory=list)


# Fields the API assigns; stripped from version request bodies.
_VERSION_READ_ONLY = {"id", "template_id", "updated_at", "thumbnail_url", "warnings"}


def template_version_payload(version: TemplateVersion) -> dict[str, Any]:
    """Request body for creating or updating a template version."""
    return version.to_wire(exclude=_VERSION_READ_ONLY)
