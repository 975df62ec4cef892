"""Provisioning lifecycle on top of the resource managers.

These are the create/read/update/delete steps an infrastructure tool runs
for each managed object: mutating calls go through the rate-limit retry
wrapper, and create/update read the entity back so the returned state
matches what the API actually stored. State persistence and plan diffing
belong to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from sendgrid_admin.errors import ValidationError
from sendgrid_admin.retry import Deadline, retry_on_rate_limit
from sendgrid_admin.types import (
    IMPLICIT_SCOPES,
    TEMPLATE_NAME_MAX_LENGTH,
    TemplateGeneration,
    TemplateVersion,
)

if TYPE_CHECKING:
    from sendgrid_admin.client import SendGridClient

logger = structlog.get_logger()


@dataclass
class APIKeyState:
    """Persisted view of an API key."""

    id: str
    name: str
    scopes: list[str] = field(default_factory=list)
    # Only known from the create response; carried forward afterwards
    api_key: str = ""


@dataclass
class TemplateState:
    """Persisted view of a transactional template."""

    id: str
    name: str
    generation: str
    updated_at: str = ""


def scopes_match(desired: Iterable[str], actual: Iterable[str]) -> bool:
    """Compare scope sets, ignoring scopes SendGrid appends by itself."""
    return set(desired) - IMPLICIT_SCOPES == set(actual) - IMPLICIT_SCOPES


def _deadline(client: SendGridClient, deadline: Deadline | None) -> Deadline:
    return deadline if deadline is not None else client.new_deadline()


# API keys


async def create_api_key(
    client: SendGridClient,
    name: str,
    scopes: list[str] | None = None,
    *,
    deadline: Deadline | None = None,
) -> APIKeyState:
    """Create an API key and return its state, secret included."""
    log = logger.bind(resource="api_key")
    log.debug("api_key.creating", name=name, scopes=scopes)

    created = await retry_on_rate_limit(
        lambda: client.api_keys.create(name, scopes),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )
    log.debug("api_key.created", api_key_id=created.id)

    state = await read_api_key(client, created.id)
    state.api_key = created.api_key
    return state


async def read_api_key(client: SendGridClient, api_key_id: str) -> APIKeyState:
    """Read an API key back. An empty ``id`` means the key no longer exists."""
    api_key = await client.api_keys.get(api_key_id)
    return APIKeyState(
        id=api_key.id,
        name=api_key.name,
        scopes=list(api_key.scopes),
    )


async def update_api_key(
    client: SendGridClient,
    current: APIKeyState,
    *,
    name: str | None = None,
    scopes: list[str] | None = None,
    deadline: Deadline | None = None,
) -> APIKeyState:
    """Apply changed fields to an API key.

    Pass only what changed. Scope changes that differ from ``current``
    only by implicit scopes are not sent.
    """
    changed_name = name if name is not None and name != current.name else ""
    changed_scopes = (
        scopes if scopes is not None and not scopes_match(scopes, current.scopes) else None
    )

    if changed_name or changed_scopes:
        log = logger.bind(resource="api_key", api_key_id=current.id)
        log.debug("api_key.updating", name=changed_name, scopes=changed_scopes)
        await retry_on_rate_limit(
            lambda: client.api_keys.update(
                current.id,
                # PUT replaces the whole key, so it needs the name too
                name=changed_name or (current.name if changed_scopes else ""),
                scopes=changed_scopes,
            ),
            _deadline(client, deadline),
            policy=client.backoff_policy(),
        )

    state = await read_api_key(client, current.id)
    state.api_key = current.api_key
    return state


async def delete_api_key(
    client: SendGridClient,
    api_key_id: str,
    *,
    deadline: Deadline | None = None,
) -> None:
    await retry_on_rate_limit(
        lambda: client.api_keys.delete(api_key_id),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )


# Templates


def _validate_template_fields(name: str, generation: str) -> None:
    if len(name) > TEMPLATE_NAME_MAX_LENGTH:
        raise ValidationError(
            message=f"name must be at most {TEMPLATE_NAME_MAX_LENGTH} characters",
            details={"field": "name", "length": len(name)},
        )
    allowed = {g.value for g in TemplateGeneration}
    if generation not in allowed:
        raise ValidationError(
            message=f"generation must be one of {sorted(allowed)}",
            details={"field": "generation", "value": generation},
        )


async def create_template(
    client: SendGridClient,
    name: str,
    generation: TemplateGeneration | str = TemplateGeneration.DYNAMIC,
    *,
    deadline: Deadline | None = None,
) -> TemplateState:
    generation_value = (
        generation.value if isinstance(generation, TemplateGeneration) else generation
    )
    _validate_template_fields(name, generation_value)

    template = await retry_on_rate_limit(
        lambda: client.templates.create(name, generation_value),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )
    logger.debug("template.created", template_id=template.id)
    return TemplateState(
        id=template.id,
        name=template.name or name,
        generation=template.generation or generation_value,
        updated_at=template.updated_at,
    )


async def read_template(client: SendGridClient, template_id: str) -> TemplateState:
    template = await client.templates.get(template_id)
    return TemplateState(
        id=template.id,
        name=template.name,
        generation=template.generation,
        updated_at=template.updated_at,
    )


async def update_template(
    client: SendGridClient,
    current: TemplateState,
    *,
    name: str | None = None,
    generation: TemplateGeneration | str | None = None,
    deadline: Deadline | None = None,
) -> TemplateState:
    """Rename a template. Generation cannot change after creation.

    Raises:
        ValidationError: If a different generation is requested
    """
    if generation is not None:
        generation_value = (
            generation.value if isinstance(generation, TemplateGeneration) else generation
        )
        if generation_value != current.generation:
            raise ValidationError(
                message="generation is immutable; recreate the template instead",
                details={"field": "generation", "current": current.generation},
            )

    if name is not None and name != current.name:
        _validate_template_fields(name, current.generation or TemplateGeneration.DYNAMIC.value)
        await retry_on_rate_limit(
            lambda: client.templates.update(current.id, name),
            _deadline(client, deadline),
            policy=client.backoff_policy(),
        )

    return await read_template(client, current.id)


async def delete_template(
    client: SendGridClient,
    template_id: str,
    *,
    deadline: Deadline | None = None,
) -> None:
    await retry_on_rate_limit(
        lambda: client.templates.delete(template_id),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )


# Template versions


async def create_template_version(
    client: SendGridClient,
    version: TemplateVersion,
    *,
    deadline: Deadline | None = None,
) -> TemplateVersion:
    """Create a version and read it back.

    The create call only fails on 5xx, so a throttled create surfaces as
    a DecodeError here rather than being retried.
    """
    created = await retry_on_rate_limit(
        lambda: client.template_versions.create(version),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )
    return await client.template_versions.get(version.template_id, created.id)


async def update_template_version(
    client: SendGridClient,
    version: TemplateVersion,
    *,
    deadline: Deadline | None = None,
) -> TemplateVersion:
    """Update a version and read it back.

    Update responses are not status-checked, so throttling surfaces as a
    DecodeError here rather than being retried.
    """
    await retry_on_rate_limit(
        lambda: client.template_versions.update(version),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )
    return await client.template_versions.get(version.template_id, version.id)


async def delete_template_version(
    client: SendGridClient,
    template_id: str,
    version_id: str,
    *,
    deadline: Deadline | None = None,
) -> None:
    await retry_on_rate_limit(
        lambda: client.template_versions.delete(template_id, version_id),
        _deadline(client, deadline),
        policy=client.backoff_policy(),
    )
