"""Transactional template manager for the SendGrid SDK."""

from __future__ import annotations

from sendgrid_admin._base import BaseManager
from sendgrid_admin.errors import classify_response
from sendgrid_admin.types import Template, TemplateGeneration, TemplateList

LIST_PAGE_SIZE = 200


class TemplateManager(BaseManager):
    """Transactional template API.

    Create, get and update accept exactly one success status each (201,
    200, 200); anything else, other 2xx codes included, is an error.
    """

    resource = "templates"

    async def create(
        self,
        name: str,
        generation: TemplateGeneration | str | None = None,
    ) -> Template:
        """Create a transactional template.

        Args:
            name: Template name, required
            generation: "dynamic" (default) or "legacy"; immutable afterwards

        Returns:
            Created Template

        Raises:
            ValidationError: If name is empty
            RemoteError: Unless the API answers 201
            DecodeError: If the body has no template ID
        """
        self._require(name, "name")

        generation_value = (
            generation.value if isinstance(generation, TemplateGeneration) else generation
        )
        body = Template(
            name=name,
            generation=generation_value or TemplateGeneration.DYNAMIC.value,
        ).to_wire()

        response = await self._transport.request("POST", "/templates", json=body)
        if response.status_code != 201:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed creating template",
            )

        template = self._decode_with_id(Template, response.body, what="template")
        self._log.debug("template.created", template_id=template.id, name=name)
        return template

    async def get(self, template_id: str) -> Template:
        """Get a transactional template with its versions.

        Args:
            template_id: Template ID

        Returns:
            Template

        Raises:
            RemoteError: Unless the API answers 200
        """
        self._require(template_id, "template_id")

        response = await self._transport.request("GET", f"/templates/{template_id}")
        if response.status_code != 200:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed getting template",
            )
        return self._decode_with_id(Template, response.body, what="template")

    async def list(
        self,
        generation: TemplateGeneration | str | None = None,
    ) -> list[Template]:
        """List templates of one generation.

        Makes a single request for the first page of up to 200 templates.

        Args:
            generation: Generation filter; None lets the API apply its default

        Returns:
            Templates in the order the API returned them
        """
        generation_value = (
            generation.value if isinstance(generation, TemplateGeneration) else generation
        )
        response = await self._transport.request(
            "GET",
            "/templates",
            params={"page_size": LIST_PAGE_SIZE, "generations": generation_value},
        )
        envelope = self._decode(TemplateList, response.body, what="templates")
        return envelope.result

    async def update(self, template_id: str, name: str) -> Template:
        """Rename a transactional template.

        Only the name can change; generation is never sent.

        Args:
            template_id: Template ID
            name: New name

        Returns:
            Updated Template

        Raises:
            RemoteError: Unless the API answers 200
        """
        self._require(template_id, "template_id")
        self._require(name, "name")

        response = await self._transport.request(
            "PATCH",
            f"/templates/{template_id}",
            json=Template(name=name).to_wire(),
        )
        if response.status_code != 200:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed updating template",
            )
        return self._decode_with_id(Template, response.body, what="template")

    async def delete(self, template_id: str) -> None:
        """Delete a transactional template and, server-side, its versions.

        Succeeds on 204 and on 404 (already gone).

        Args:
            template_id: Template ID

        Raises:
            RemoteError: On any other status; the body is not included
        """
        self._require(template_id, "template_id")

        response = await self._transport.request("DELETE", f"/templates/{template_id}")
        if response.status_code not in (204, 404):
            raise classify_response(
                response.status_code,
                "",
                message="failed deleting template",
            )
        self._log.debug("template.deleted", template_id=template_id)
